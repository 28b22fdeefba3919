from cloudobjects.types import ClientError
from botocore.exceptions import ClientError as BotoClientError
import inspect
from functools import wraps


def attach_exception_handler(func):
    """
    Decorates an IAM or STS call so that a botocore ClientError surfaces as a cloudobjects ClientError, which
    carries the error code and message as properties and a traceback that ends inside this package.
    :param func: The function making the AWS call
    :return: Decorated function
    """
    @wraps(func)
    def client_error_wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BotoClientError as e:
            raise ClientError.from_boto(e) from None
    return client_error_wrapper


def resolve_client(get_client, param='client'):
    """
    Decorates a function that takes an optional boto3 client so that, when the caller leaves it unset, the
    client of the owning module is used. The module client is only requested when it is needed, so passing
    an explicit client never builds a session.
    :param get_client: Returns the module client
    :param param: The name of the client parameter
    :return: Decorator
    """
    def decorate(func):
        arg_names = inspect.getfullargspec(func).args
        position = arg_names.index(param) if param in arg_names else None

        @wraps(func)
        def client_resolver(*args, **kwargs):
            if position is not None and len(args) > position:
                if args[position] is None:
                    args = args[:position] + (get_client(),) + args[position + 1:]
            elif kwargs.get(param) is None:
                kwargs[param] = get_client()
            return func(*args, **kwargs)
        return client_resolver
    return decorate


def iterate_through_paginated_items(callback, items_key, next_key):
    """
    Iterates the items of a paginated list call. IAM list calls only return a marker when the results
    are truncated, so the presence of the next key drives the loop.
    :param callback: Called with no argument for the first page and with the marker for later ones
    :param items_key: The response key holding the items
    :param next_key: The response key holding the marker for the next page
    """
    pages_to_get = True
    next_token = None
    while pages_to_get:
        if next_token:
            response = callback(next_token)
        else:
            response = callback()
        if response.get(next_key):
            next_token = response[next_key]
        else:
            pages_to_get = False
        for item in response.get(items_key, []):
            yield item


def copy_non_null_keys(session_args):
    """
    Drops the unset arguments from a set_session call so that boto3 falls back to its own credential and
    region resolution for them.
    """
    return {key: value for key, value in session_args.items() if value is not None}


def map_parameters(parameters, key_map):
    """
    Maps the set arguments of a wrapper function onto the request parameter names of an IAM call.
    :param parameters: The arguments of the wrapper, usually locals()
    :param key_map: Argument name to request parameter name, e.g. {'name': 'RoleName'}
    :return: The request parameters with unset values left out
    """
    return {request_key: parameters[arg] for arg, request_key in key_map.items()
            if parameters.get(arg) is not None}
