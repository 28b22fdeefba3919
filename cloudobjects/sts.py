import cloudobjects.core
from cloudobjects.core import attach_exception_handler
from cloudobjects import arn as arns
import boto3


# A local instance of the boto3 session to use
__session = None
# Local STS client, built on first use
__client = None


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
        __client = _get_session().client('sts')
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
    __client = None


@attach_exception_handler
def caller_identity():
    """
    Returns the identity of the caller associated with the current session.
    :return: A dict with the UserId, Account and Arn of the caller
    """
    return _get_client().get_caller_identity()


def account_id():
    """
    Returns the account id of the AWS account associated with the current session.
    :return: The account id
    """
    return caller_identity()['Account']


def partition():
    """
    Returns the partition of the current session, such as *aws*, *aws-cn* or *aws-us-gov*.
    """
    return arns.parse(caller_identity()['Arn']).partition
