import json
from collections.abc import Mapping
from urllib import parse

DEFAULT_VERSION = '2012-10-17'

EFFECT_ALLOW = 'Allow'
EFFECT_DENY = 'Deny'


def _listify(value):
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return list(value)
    return value


def _is_empty(value):
    return value is None or (isinstance(value, (list, tuple, dict, str)) and len(value) == 0)


class Statement:
    """
    A single statement within an IAM policy document. Actions and resources may be given as a single
    string or as a list and are written back out in the same form.
    """
    __fields = [
        ('sid', 'Sid'),
        ('effect', 'Effect'),
        ('principal', 'Principal'),
        ('action', 'Action'),
        ('not_action', 'NotAction'),
        ('resource', 'Resource'),
        ('not_resource', 'NotResource'),
        ('condition', 'Condition'),
    ]

    def __init__(self, effect, action=None, resource=None, principal=None, condition=None,
                 sid=None, not_action=None, not_resource=None):
        self.effect = effect
        self.action = _listify(action)
        self.resource = _listify(resource)
        self.principal = principal
        self.condition = condition
        self.sid = sid
        self.not_action = _listify(not_action)
        self.not_resource = _listify(not_resource)

    def to_dict(self):
        result = {}
        for attr, key in self.__fields:
            value = getattr(self, attr)
            if not _is_empty(value):
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, obj):
        # a statement without an Effect keeps it unset rather than defaulting to Allow
        return cls(**{attr: obj.get(key) for attr, key in cls.__fields})

    def __eq__(self, other):
        if isinstance(other, Statement):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    def __repr__(self):
        return f'Statement({self.to_dict()})'


class PolicyDocument:
    """
    An IAM policy document, used both for managed policies and for the trust (AssumeRole) policy of a role.

    .. code-block:: python

        >>> doc = PolicyDocument.allow('s3:GetObject', 'arn:aws:s3:::my-bucket/*')
        >>> doc.to_json()
        '{"Version": "2012-10-17", "Statement": [{"Effect": "Allow", "Action": "s3:GetObject", ...}]}'
    """

    def __init__(self, statements=None, version=DEFAULT_VERSION):
        self.version = version
        self.statements = list(statements) if statements else []

    def to_dict(self):
        result = {}
        if self.version:
            result['Version'] = self.version
        result['Statement'] = [s.to_dict() for s in self.statements]
        return result

    def to_json(self, **kwargs):
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def from_dict(cls, obj):
        statements = obj.get('Statement', [])
        # a document with a single statement may carry it as an object rather than a list
        if isinstance(statements, Mapping):
            statements = [statements]
        return cls([Statement.from_dict(s) for s in statements], version=obj.get('Version'))

    @classmethod
    def from_json(cls, value):
        """
        Loads a policy document from a JSON string. Documents returned by IAM are URL encoded, those are
        decoded before parsing.
        """
        value = value.strip()
        if not value.startswith('{'):
            value = parse.unquote(value)
        return cls.from_dict(json.loads(value))

    @classmethod
    def service_trust(cls, *services):
        """
        Generates a policy document to use as the AssumeRole policy for a service role.
        :param services: The services that will be able to use the role, e.g. 'lambda' or 'ec2.amazonaws.com'
        :return: A PolicyDocument
        """
        principals = [s if '.' in s else '{}.amazonaws.com'.format(s) for s in services]
        return cls([Statement(effect=EFFECT_ALLOW,
                              principal={'Service': principals[0] if len(principals) == 1 else principals},
                              action='sts:AssumeRole')])

    @classmethod
    def allow(cls, actions, resources):
        return cls([Statement(effect=EFFECT_ALLOW, action=actions, resource=resources)])

    def __eq__(self, other):
        if isinstance(other, PolicyDocument):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    def __repr__(self):
        return f'PolicyDocument({self.to_dict()})'


def as_document_string(document):
    """
    Marshals a policy document into the JSON string expected by IAM.
    :param document: A PolicyDocument, a dict, or an already rendered JSON string
    :return: JSON string
    """
    if isinstance(document, PolicyDocument):
        return document.to_json()
    elif isinstance(document, Mapping):
        return json.dumps(document)
    return document


def as_policy_document(document):
    """
    Converts a document as returned by IAM into a PolicyDocument. Botocore decodes documents into dicts,
    but a raw client may hand back the URL encoded string.
    """
    if document is None or isinstance(document, PolicyDocument):
        return document
    elif isinstance(document, Mapping):
        return PolicyDocument.from_dict(document)
    return PolicyDocument.from_json(document)
