from cloudobjects.arn import parse as parse_arn


class ClientError(Exception):
    """
    Wraps a boto ClientError raised by an IAM or STS call. All of the attributes of the source exception are
    accessible, including the *response* and *operation_name*. The traceback is truncated to the last
    cloudobjects frame so that failures read from the call that was made rather than from inside botocore.
    The error *code* and *message* are accessible as properties.
    """

    def __init__(self, error):
        super().__init__(str(error))
        self.__error = error

    @classmethod
    def from_boto(cls, error):
        """
        Captures the exception returned by Boto and truncates the traceback to stop at the last *cloudobjects*
        operation.
        """
        tb = error.__traceback__
        package_found = 'cloudobjects' in tb.tb_frame.f_code.co_filename
        while tb.tb_next:
            if 'cloudobjects' in tb.tb_next.tb_frame.f_code.co_filename:
                package_found = True
            elif package_found:
                tb.tb_next = None
                break
            tb = tb.tb_next
        return cls(error).with_traceback(tb)

    def __getattr__(self, name):
        # only reached for attributes not set on the wrapper itself
        error = self.__dict__.get('_ClientError__error')
        if error is not None and hasattr(error, name):
            return getattr(error, name)
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")

    @property
    def code(self):
        """
        Surfaces the error code that was returned from the AWS service.

        .. code-block:: python

            try:
                role.read()
            except cobj.ClientError as e:
                if e.code == cobj.iam.error_codes.NoSuchEntity:
                    # create it instead

        :return: A string containing the error code returned from the service.
        """
        return self.__error.response['Error']['Code']

    @property
    def message(self):
        """
        Surfaces the error message that was returned from the AWS service.

        :return: A string containing the error message.
        """
        return self.__error.response['Error']['Message']


class InstanceNotYetCreatedError(Exception):
    """
    Raised when an operation needs an existing AWS resource but the instance has no ARN yet.
    """

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class Instance:
    """
    Base type for an AWS resource managed through create, read, update and delete calls. An instance is
    considered created once it knows the ARN of its resource, either because it created it, read it, or was
    constructed with the ARN of a resource that already exists.
    """
    kind = 'Instance'

    def __init__(self, arn=None):
        self._arn = parse_arn(arn) if isinstance(arn, str) else arn

    def create(self, client=None):
        raise NotImplementedError

    def read(self, client=None):
        raise NotImplementedError

    def update(self, client=None):
        raise NotImplementedError

    def delete(self, client=None):
        raise NotImplementedError

    @property
    def arn(self):
        """
        The ARN of the resource, or None if it has not been created.
        """
        return self._arn

    def is_created(self, client=None):
        return self._arn is not None

    def _require_created(self, name):
        if not self.is_created():
            raise InstanceNotYetCreatedError(f"{self.kind} '{name}' not yet created")
