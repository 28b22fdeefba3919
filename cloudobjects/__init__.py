import boto3

import cloudobjects.core
from cloudobjects.types import ClientError, InstanceNotYetCreatedError, Instance
from cloudobjects.arn import ARN, InvalidARNError
from cloudobjects import arn
from cloudobjects import sts
from cloudobjects import iam
from cloudobjects.iam import RoleInstance, PolicyInstance, PolicyAttachmentInstance
from cloudobjects.iam.document import PolicyDocument, Statement

__version__ = "0.3.0"


def _propagate_session():
    sts.set_session(boto_session=__session)
    iam.set_session(boto_session=__session)


# A local instance of the boto3 session to use, created on first use
__session = None


def session():
    global __session
    if __session is None:
        __session = boto3.session.Session()
        _propagate_session()
    return __session


def set_session(aws_access_key_id=None,
                aws_secret_access_key=None,
                aws_session_token=None,
                region_name=None,
                profile_name=None,
                boto_session=None):
    """
    Sets the boto3 session for this package to use a specified configuration state. The session is shared
    by every service module.
    :param aws_access_key_id: AWS access key ID
    :param aws_secret_access_key: AWS secret access key
    :param aws_session_token: AWS temporary session token
    :param region_name: Default region when creating new connections
    :param profile_name: The name of a profile to use
    :param boto_session: An existing session to use
    :return: None
    """
    global __session
    __session = boto_session if boto_session is not None else boto3.session.Session(
        **cloudobjects.core.copy_non_null_keys(locals()))
    _propagate_session()
