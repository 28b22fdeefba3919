import logging
from cloudobjects import arn as arns
from cloudobjects import iam
from cloudobjects.types import Instance

logger = logging.getLogger(__name__)


class RoleInstance(Instance):
    """
    An IAM role and the trust policy that controls who may assume it.

    .. code-block:: python

        >>> role = RoleInstance('my-function', 'Execution role for my-function', 3600,
        ...                     PolicyDocument.service_trust('lambda'))
        >>> role.create()
        >>> role.is_created()
        True

    A role that already exists can be represented by passing its ARN, which allows it to be updated or
    deleted without creating it first.
    """
    kind = 'Role'

    def __init__(self, name, description=None, max_session_duration=iam.DEFAULT_MAX_SESSION_DURATION,
                 policy_document=None, path=None, arn=None):
        super().__init__(arn)
        self.name = name
        self.description = description
        self.max_session_duration = max_session_duration
        self.policy_document = policy_document
        self.path = path

    def create(self, client=None):
        """
        Creates the role.
        :param client: The boto3 IAM client to use, defaults to the iam module client
        :return: The ARN of the new role
        """
        response = iam.create_role(self.name, self.description, self.max_session_duration, self.policy_document,
                                   path=self.path, client=client)
        self._arn = arns.parse(response['Role']['Arn'])
        return self._arn

    def read(self, client=None):
        """
        Refreshes the ARN, name, description and session duration of the role from IAM, looking it up by name.
        The trust policy is left as it is held locally.
        :param client: The boto3 IAM client to use, defaults to the iam module client
        """
        role = iam.get_role_by_name(self.name, client=client)['Role']
        self._arn = arns.arnify(role['Arn'])[0]
        self.description = role.get('Description')
        self.max_session_duration = role.get('MaxSessionDuration', iam.DEFAULT_MAX_SESSION_DURATION)
        self.name = role['RoleName']
        logger.debug('Read role %s', self._arn)

    def update(self, client=None):
        self._require_created(self.name)
        iam.update_role(self._arn, self.description, self.policy_document,
                        max_session_duration=self.max_session_duration, client=client)

    def delete(self, client=None):
        """
        Deletes the role. A role that was already removed outside of this instance is treated as deleted.
        """
        self._require_created(self.name)
        iam.delete_role(self._arn, client=client)
        self._arn = None

    def __repr__(self):
        return f"RoleInstance(name='{self.name}', arn='{self._arn or ''}')"
