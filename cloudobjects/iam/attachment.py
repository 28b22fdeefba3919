from cloudobjects import arn as arns
from cloudobjects import iam
from cloudobjects.types import Instance


class PolicyAttachmentInstance(Instance):
    """
    The attachment of a managed policy to a role, user or group. Once the attachment is known to exist its
    ARN is the ARN of the attached policy.

    .. code-block:: python

        >>> attachment = PolicyAttachmentInstance(policy.arn, iam.TARGET_ROLE, role.name)
        >>> attachment.create()
    """
    kind = 'PolicyAttachment'

    def __init__(self, policy_arn, target_type, target_name):
        super().__init__()
        iam.check_target_type(target_type)
        self.policy_arn = arns.parse(policy_arn) if isinstance(policy_arn, str) else policy_arn
        self.target_type = target_type
        self.target_name = target_name

    @property
    def name(self):
        return '{} to {} {}'.format(arns.friendly_name(self.policy_arn), self.target_type, self.target_name)

    def create(self, client=None):
        iam.attach_policy(self.policy_arn, self.target_type, self.target_name, client=client)
        self._arn = self.policy_arn
        return self._arn

    def read(self, client=None):
        """
        Checks whether the policy is currently attached to the target.
        :param client: The boto3 IAM client to use, defaults to the iam module client
        :return: True if the policy is attached
        """
        attached = [p['PolicyArn'] for p in iam.iter_attached_policies(self.target_type, self.target_name,
                                                                       client=client)]
        self._arn = self.policy_arn if str(self.policy_arn) in attached else None
        return self._arn is not None

    def update(self, client=None):
        # attaching an already attached policy is a no-op in IAM
        self._require_created(self.name)
        iam.attach_policy(self.policy_arn, self.target_type, self.target_name, client=client)

    def delete(self, client=None):
        self._require_created(self.name)
        iam.detach_policy(self.policy_arn, self.target_type, self.target_name, client=client)
        self._arn = None

    def __repr__(self):
        return f"PolicyAttachmentInstance(policy_arn='{self.policy_arn}', target_type='{self.target_type}', " \
               f"target_name='{self.target_name}')"
