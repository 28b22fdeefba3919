"""
Helpers for working with Amazon Resource Names.

.. code-block:: python

    >>> import cloudobjects as cobj
    >>> arn = cobj.arn.parse('arn:aws:iam::123456789012:role/service-role/my-role')
    >>> arn.account_id
    '123456789012'
    >>> cobj.arn.friendly_name(arn)
    'my-role'
"""
from collections import namedtuple

ARN_PREFIX = 'arn:'
ARN_SECTIONS = 6
ARN_DELIMITER = ':'


class InvalidARNError(ValueError):
    pass


class ARN(namedtuple('ARN', ['partition', 'service', 'region', 'account_id', 'resource'])):
    """
    A parsed ARN. Rendering it with str() produces the canonical form.
    """
    __slots__ = ()

    def __str__(self):
        return ARN_DELIMITER.join(['arn', self.partition, self.service, self.region, self.account_id, self.resource])

    @property
    def resource_type(self):
        """
        The leading segment of the resource, such as *role* or *policy* for IAM.
        """
        return self.resource.split('/', 1)[0]

    @property
    def friendly_name(self):
        return friendly_name(self)


def parse(value):
    """
    Parses an ARN string into its components. Only the first five delimiters are significant so that a
    resource may itself contain colons.
    :param value: The ARN string
    :return: An ARN
    """
    if not isinstance(value, str) or not value.startswith(ARN_PREFIX):
        raise InvalidARNError('arn: invalid prefix')
    sections = value.split(ARN_DELIMITER, ARN_SECTIONS - 1)
    if len(sections) != ARN_SECTIONS:
        raise InvalidARNError('arn: not enough sections')
    return ARN(*sections[1:])


def arnify(*values):
    """
    Parses each of the provided strings into an ARN.
    :param values: ARN strings
    :return: A list of ARNs in the order they were provided
    """
    return [parse(value) for value in values]


def is_arn(value):
    try:
        parse(value)
        return True
    except InvalidARNError:
        return False


def friendly_name(arn):
    """
    Returns the friendly name of an IAM entity from its ARN, which is the final segment of the resource path.
    :param arn: An ARN or ARN string
    :return: The friendly name
    """
    if isinstance(arn, str):
        arn = parse(arn)
    return arn.resource.rsplit('/', 1)[-1]
