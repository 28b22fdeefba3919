import logging
import cloudobjects.core
from cloudobjects.core import attach_exception_handler, resolve_client, iterate_through_paginated_items
from cloudobjects.types import ClientError
from cloudobjects import arn as arns
from cloudobjects import sts
from cloudobjects.iam.document import PolicyDocument, Statement, as_document_string, as_policy_document
import boto3

logger = logging.getLogger(__name__)

# A local instance of the boto3 session to use
__session = None
# Local IAM client, built on first use
__client = None

# IAM keeps at most five versions of a managed policy
MAX_POLICY_VERSIONS = 5
DEFAULT_MAX_SESSION_DURATION = 3600

TARGET_ROLE = 'role'
TARGET_USER = 'user'
TARGET_GROUP = 'group'
TARGET_TYPES = (TARGET_ROLE, TARGET_USER, TARGET_GROUP)


def __getattr__(name):
    if name == 'session':
        return _get_session()
    elif name == 'client':
        return _get_client()
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def _get_session():
    global __session
    if __session is None:
        __session = boto3.session.Session()
    return __session


def _get_client():
    global __client
    if __client is None:
        __client = _get_session().client('iam')
    return __client


def set_session(aws_access_key_id=None,
                aws_secret_access_key=None,
                aws_session_token=None,
                region_name=None,
                profile_name=None,
                boto_session=None):
    """
    Sets the boto3 session for this module to use a specified configuration state.
    :param aws_access_key_id: AWS access key ID
    :param aws_secret_access_key: AWS secret access key
    :param aws_session_token: AWS temporary session token
    :param region_name: Default region when creating new connections
    :param profile_name: The name of a profile to use
    :param boto_session: An existing session to use
    :return: None
    """
    global __session, __client
    __session = boto_session if boto_session is not None else boto3.session.Session(
        **cloudobjects.core.copy_non_null_keys(locals()))
    sts.set_session(boto_session=__session)
    __client = None


def _ignore_missing(error, description):
    if error.code == error_codes.NoSuchEntity:
        logger.debug('%s no longer exists, ignoring', description)
        return True
    return False


@attach_exception_handler
@resolve_client(_get_client, 'client')
def create_role(name, description, max_session_duration, document, path=None, client=None):
    """
    Creates an IAM role.
    :param name: Name of the role
    :param description: A description of the role
    :param max_session_duration: The maximum session duration in seconds
    :param document: The trust policy that grants an entity permission to assume the role
    :param path: The path for the role
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: The CreateRole response
    """
    params = cloudobjects.core.map_parameters(locals(), {
        'name': 'RoleName',
        'description': 'Description',
        'max_session_duration': 'MaxSessionDuration',
        'path': 'Path',
    })
    params['AssumeRolePolicyDocument'] = as_document_string(document)
    response = client.create_role(**params)
    logger.info('Created role %s', response['Role']['Arn'])
    return response


@attach_exception_handler
@resolve_client(_get_client, 'client')
def update_role(arn, description, document, max_session_duration=None, client=None):
    """
    Updates the description and session duration of a role and replaces its trust policy.
    :param arn: The ARN of the role
    :param description: The new description
    :param document: The new trust policy, left unchanged if None
    :param max_session_duration: The maximum session duration in seconds, left unchanged if None
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: The UpdateRole response
    """
    name = arns.friendly_name(arn)
    params = {'RoleName': name, 'Description': description if description is not None else ''}
    if max_session_duration is not None:
        params['MaxSessionDuration'] = max_session_duration
    response = client.update_role(**params)
    if document is not None:
        client.update_assume_role_policy(RoleName=name, PolicyDocument=as_document_string(document))
    logger.info('Updated role %s', arn)
    return response


@attach_exception_handler
@resolve_client(_get_client, 'client')
def _delete_role(name, client=None):
    return client.delete_role(RoleName=name)


def delete_role(arn, client=None):
    """
    Deletes a role. A role that no longer exists is treated as deleted. Note that a role cannot be deleted
    while policies are attached to it.
    :param arn: The ARN of the role
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: The DeleteRole response, or None if the role did not exist
    """
    try:
        response = _delete_role(arns.friendly_name(arn), client=client)
    except ClientError as e:
        if _ignore_missing(e, 'Role {}'.format(arn)):
            return None
        raise
    logger.info('Deleted role %s', arn)
    return response


def get_role(arn, client=None):
    """
    Retrieves a role by ARN.
    :param arn: The ARN of the role
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: The GetRole response
    """
    return get_role_by_name(arns.friendly_name(arn), client=client)


@attach_exception_handler
@resolve_client(_get_client, 'client')
def get_role_by_name(name, client=None):
    return client.get_role(RoleName=name)


@attach_exception_handler
@resolve_client(_get_client, 'client')
def create_policy(name, description, document, path=None, client=None):
    """
    Creates a customer managed IAM policy.
    :param name: The name of the policy
    :param description: A friendly description of the policy
    :param document: The policy document to use (PolicyDocument, dict or str)
    :param path: The path for the policy
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: The CreatePolicy response
    """
    params = cloudobjects.core.map_parameters(locals(), {
        'name': 'PolicyName',
        'description': 'Description',
        'path': 'Path',
    })
    params['PolicyDocument'] = as_document_string(document)
    response = client.create_policy(**params)
    logger.info('Created policy %s', response['Policy']['Arn'])
    return response


@attach_exception_handler
@resolve_client(_get_client, 'client')
def iter_policy_versions(arn, client=None):
    """
    Iterates over the versions of a managed policy.
    :param arn: The ARN of the policy
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: A generator of policy version dicts
    """
    params = {'PolicyArn': str(arn)}

    def list_versions(marker=None):
        if marker:
            return client.list_policy_versions(Marker=marker, **params)
        return client.list_policy_versions(**params)

    # the generator is drained here so that errors surface through the exception handler
    return iter(list(iterate_through_paginated_items(list_versions, 'Versions', 'Marker')))


@attach_exception_handler
@resolve_client(_get_client, 'client')
def _delete_policy_version(arn, version_id, client=None):
    logger.debug('Deleting version %s of policy %s', version_id, arn)
    return client.delete_policy_version(PolicyArn=str(arn), VersionId=version_id)


def _version_number(version):
    return int(version['VersionId'].lstrip('v'))


@attach_exception_handler
@resolve_client(_get_client, 'client')
def _create_policy_version(arn, document, client=None):
    return client.create_policy_version(PolicyArn=str(arn),
                                        PolicyDocument=as_document_string(document),
                                        SetAsDefault=True)


def update_policy(arn, document, client=None):
    """
    Creates a new default version of a managed policy. You can have a max of 5 versions, this will remove
    the oldest non-default version if necessary.
    :param arn: The ARN of the policy
    :param document: The new policy document
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: The CreatePolicyVersion response
    """
    if document is None:
        raise ValueError("A policy document is required to update policy {}".format(arn))
    versions = list(iter_policy_versions(arn, client=client))
    if len(versions) >= MAX_POLICY_VERSIONS:
        for version in sorted(versions, key=_version_number):
            if not version.get('IsDefaultVersion'):
                _delete_policy_version(arn, version['VersionId'], client=client)
                break
    response = _create_policy_version(arn, document, client=client)
    logger.info('Updated policy %s to version %s', arn, response['PolicyVersion']['VersionId'])
    return response


@attach_exception_handler
@resolve_client(_get_client, 'client')
def _delete_policy(arn, client=None):
    return client.delete_policy(PolicyArn=str(arn))


def delete_policy(arn, client=None):
    """
    Deletes a managed policy. IAM only deletes a policy once its non-default versions are gone, so those are
    removed first. A policy that no longer exists is treated as deleted. Note that a policy cannot be deleted
    while it is attached to any roles, users or groups.
    :param arn: The ARN of the policy
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: The DeletePolicy response, or None if the policy did not exist
    """
    description = 'Policy {}'.format(arn)
    try:
        versions = list(iter_policy_versions(arn, client=client))
    except ClientError as e:
        if _ignore_missing(e, description):
            return None
        raise

    for version in versions:
        if not version.get('IsDefaultVersion'):
            _delete_policy_version(arn, version['VersionId'], client=client)

    try:
        response = _delete_policy(arn, client=client)
    except ClientError as e:
        if _ignore_missing(e, description):
            return None
        raise
    logger.info('Deleted policy %s', arn)
    return response


@attach_exception_handler
@resolve_client(_get_client, 'client')
def get_policy(arn, client=None):
    return client.get_policy(PolicyArn=str(arn))


@attach_exception_handler
@resolve_client(_get_client, 'client')
def get_policy_version(policy, client=None):
    """
    Retrieves the default version of a managed policy.
    :param policy: A GetPolicy response
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: The GetPolicyVersion response
    """
    return client.get_policy_version(PolicyArn=policy['Policy']['Arn'],
                                     VersionId=policy['Policy']['DefaultVersionId'])


def policy_arn(name, path=None):
    """
    Builds the ARN of a customer managed policy in the account associated with the current session. The
    partition is taken from the caller identity so that China and GovCloud accounts resolve correctly.
    :param name: The name of the policy
    :param path: The path of the policy, defaults to '/'
    :return: The policy ARN
    """
    path = path or '/'
    if not path.startswith('/'):
        path = '/' + path
    if not path.endswith('/'):
        path = path + '/'
    identity = sts.caller_identity()
    partition = arns.parse(identity['Arn']).partition
    return arns.parse('arn:{}:iam::{}:policy{}{}'.format(partition, identity['Account'], path, name))


def check_target_type(target_type):
    if target_type not in TARGET_TYPES:
        raise ValueError("Unsupported attachment target type '{}', must be one of {}".format(
            target_type, ', '.join(TARGET_TYPES)))


def _target_params(target_type, target_name):
    check_target_type(target_type)
    return {'{}Name'.format(target_type.capitalize()): target_name}


@attach_exception_handler
@resolve_client(_get_client, 'client')
def attach_policy(policy_arn, target_type, target_name, client=None):
    """
    Attaches a managed policy to a role, user or group.
    :param policy_arn: The ARN of the policy
    :param target_type: One of 'role', 'user' or 'group'
    :param target_name: The name of the role, user or group
    :param client: The boto3 IAM client to use, defaults to the module client
    """
    params = _target_params(target_type, target_name)
    getattr(client, 'attach_{}_policy'.format(target_type))(PolicyArn=str(policy_arn), **params)
    logger.info('Attached policy %s to %s %s', policy_arn, target_type, target_name)


@attach_exception_handler
@resolve_client(_get_client, 'client')
def _detach_policy(policy_arn, target_type, target_name, client=None):
    params = _target_params(target_type, target_name)
    getattr(client, 'detach_{}_policy'.format(target_type))(PolicyArn=str(policy_arn), **params)


def detach_policy(policy_arn, target_type, target_name, client=None):
    """
    Detaches a managed policy from a role, user or group. A missing attachment is treated as detached.
    :param policy_arn: The ARN of the policy
    :param target_type: One of 'role', 'user' or 'group'
    :param target_name: The name of the role, user or group
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: True if the policy was detached, False if it was not attached
    """
    try:
        _detach_policy(policy_arn, target_type, target_name, client=client)
    except ClientError as e:
        if _ignore_missing(e, 'Attachment of {} to {} {}'.format(policy_arn, target_type, target_name)):
            return False
        raise
    logger.info('Detached policy %s from %s %s', policy_arn, target_type, target_name)
    return True


@attach_exception_handler
@resolve_client(_get_client, 'client')
def iter_attached_policies(target_type, target_name, client=None):
    """
    Iterates over the managed policies attached to a role, user or group.
    :param target_type: One of 'role', 'user' or 'group'
    :param target_name: The name of the role, user or group
    :param client: The boto3 IAM client to use, defaults to the module client
    :return: A generator of dicts with the PolicyName and PolicyArn of each attached policy
    """
    params = _target_params(target_type, target_name)
    list_call = getattr(client, 'list_attached_{}_policies'.format(target_type))

    def list_attached(marker=None):
        if marker:
            return list_call(Marker=marker, **params)
        return list_call(**params)

    return iter(list(iterate_through_paginated_items(list_attached, 'AttachedPolicies', 'Marker')))


class error_codes:
    ConcurrentModification = 'ConcurrentModification'
    DeleteConflict = 'DeleteConflict'
    EntityAlreadyExists = 'EntityAlreadyExists'
    EntityTemporarilyUnmodifiable = 'EntityTemporarilyUnmodifiable'
    InvalidInput = 'InvalidInput'
    LimitExceeded = 'LimitExceeded'
    MalformedPolicyDocument = 'MalformedPolicyDocument'
    NoSuchEntity = 'NoSuchEntity'
    PolicyNotAttachable = 'PolicyNotAttachable'
    ServiceFailure = 'ServiceFailure'
    UnmodifiableEntity = 'UnmodifiableEntity'


from cloudobjects.iam.role import RoleInstance
from cloudobjects.iam.policy import PolicyInstance
from cloudobjects.iam.attachment import PolicyAttachmentInstance
