import logging
from cloudobjects import arn as arns
from cloudobjects import iam
from cloudobjects.iam.document import as_policy_document
from cloudobjects.types import Instance

logger = logging.getLogger(__name__)


class PolicyInstance(Instance):
    """
    A customer managed IAM policy. Updating the policy publishes the current document as a new default
    version, and deleting it removes every non-default version before the policy itself.
    """
    kind = 'Policy'

    def __init__(self, name, description=None, policy_document=None, path=None, arn=None):
        super().__init__(arn)
        self.name = name
        self.description = description
        self.policy_document = policy_document
        self.path = path

    def create(self, client=None):
        """
        Creates the policy with the current document as its first version.
        :param client: The boto3 IAM client to use, defaults to the iam module client
        :return: The ARN of the new policy
        """
        response = iam.create_policy(self.name, self.description, self.policy_document, path=self.path,
                                     client=client)
        self._arn = arns.parse(response['Policy']['Arn'])
        return self._arn

    def read(self, client=None):
        """
        Refreshes the name, description and document of the policy from its default version. A policy that
        has no ARN yet is looked up by name in the account of the current session.
        :param client: The boto3 IAM client to use, defaults to the iam module client
        """
        policy_arn = self._arn if self._arn is not None else iam.policy_arn(self.name, self.path)
        policy = iam.get_policy(policy_arn, client=client)
        version = iam.get_policy_version(policy, client=client)
        self._arn = arns.parse(policy['Policy']['Arn'])
        self.name = policy['Policy']['PolicyName']
        self.description = policy['Policy'].get('Description')
        self.path = policy['Policy'].get('Path', self.path)
        self.policy_document = as_policy_document(version['PolicyVersion']['Document'])
        logger.debug('Read policy %s at version %s', self._arn, version['PolicyVersion']['VersionId'])

    def update(self, client=None):
        self._require_created(self.name)
        iam.update_policy(self._arn, self.policy_document, client=client)

    def delete(self, client=None):
        self._require_created(self.name)
        iam.delete_policy(self._arn, client=client)
        self._arn = None

    def __repr__(self):
        return f"PolicyInstance(name='{self.name}', arn='{self._arn or ''}')"
