import json
import unittest
import boto3
from unittest import mock
from botocore.exceptions import ClientError as BotoClientError
import cloudobjects as cobj
from cloudobjects import iam
from cloudobjects.core import iterate_through_paginated_items, map_parameters
from cloudobjects.iam.document import PolicyDocument


ROLE_ARN = 'arn:aws:iam::123456789012:role/service-role/my-role'
POLICY_ARN = 'arn:aws:iam::123456789012:policy/my-policy'
TRUST_POLICY = PolicyDocument.service_trust('lambda')


def boto_error(code, operation):
    return BotoClientError({'Error': {'Code': code, 'Message': 'Testing {}'.format(code)}}, operation)


class ClientCallTests(unittest.TestCase):

    def setUp(self):
        self.client = mock.MagicMock()

    def test_update_role(self):
        iam.update_role(ROLE_ARN, 'New description', TRUST_POLICY, max_session_duration=7200, client=self.client)
        self.client.update_role.assert_called_once_with(RoleName='my-role', Description='New description',
                                                        MaxSessionDuration=7200)
        kwargs = self.client.update_assume_role_policy.call_args.kwargs
        self.assertEqual(kwargs['RoleName'], 'my-role')
        self.assertEqual(json.loads(kwargs['PolicyDocument']), TRUST_POLICY.to_dict())

    def test_create_role_skips_missing_parameters(self):
        self.client.create_role.return_value = {'Role': {'Arn': ROLE_ARN}}
        role = cobj.RoleInstance('my-role', policy_document={'Version': '2012-10-17', 'Statement': []})
        role.create(client=self.client)
        kwargs = self.client.create_role.call_args.kwargs
        self.assertNotIn('Description', kwargs)
        self.assertNotIn('Path', kwargs)
        self.assertEqual(kwargs['MaxSessionDuration'], 3600)
        self.assertEqual(json.loads(kwargs['AssumeRolePolicyDocument']), {'Version': '2012-10-17', 'Statement': []})
        self.assertEqual(str(role.arn), ROLE_ARN)

    def test_delete_role_ignores_missing(self):
        self.client.delete_role.side_effect = boto_error('NoSuchEntity', 'DeleteRole')
        self.assertIsNone(iam.delete_role(ROLE_ARN, client=self.client))
        self.client.delete_role.assert_called_once_with(RoleName='my-role')

    def test_delete_role_raises(self):
        self.client.delete_role.side_effect = boto_error('DeleteConflict', 'DeleteRole')
        with self.assertRaises(cobj.ClientError) as context:
            iam.delete_role(ROLE_ARN, client=self.client)
        self.assertEqual(context.exception.code, 'DeleteConflict')
        self.assertEqual(context.exception.message, 'Testing DeleteConflict')
        self.assertEqual(context.exception.operation_name, 'DeleteRole')
        self.assertEqual(context.exception.response['Error']['Code'], 'DeleteConflict')

    def test_delete_policy_strips_versions(self):
        self.client.list_policy_versions.return_value = {
            'Versions': [
                {'VersionId': 'v1', 'IsDefaultVersion': False},
                {'VersionId': 'v2', 'IsDefaultVersion': False},
                {'VersionId': 'v3', 'IsDefaultVersion': True},
            ],
            'IsTruncated': False
        }
        iam.delete_policy(POLICY_ARN, client=self.client)
        self.assertEqual(self.client.delete_policy_version.call_args_list, [
            mock.call(PolicyArn=POLICY_ARN, VersionId='v1'),
            mock.call(PolicyArn=POLICY_ARN, VersionId='v2'),
        ])
        self.client.delete_policy.assert_called_once_with(PolicyArn=POLICY_ARN)

    def test_delete_policy_ignores_missing(self):
        self.client.list_policy_versions.return_value = {'Versions': [], 'IsTruncated': False}
        self.client.delete_policy.side_effect = boto_error('NoSuchEntity', 'DeletePolicy')
        self.assertIsNone(iam.delete_policy(POLICY_ARN, client=self.client))

        self.client.list_policy_versions.side_effect = boto_error('NoSuchEntity', 'ListPolicyVersions')
        self.assertIsNone(iam.delete_policy(POLICY_ARN, client=self.client))

    def test_delete_policy_version_failure(self):
        self.client.list_policy_versions.return_value = {
            'Versions': [{'VersionId': 'v1', 'IsDefaultVersion': False}]
        }
        self.client.delete_policy_version.side_effect = boto_error('AccessDenied', 'DeletePolicyVersion')
        with self.assertRaises(cobj.ClientError) as context:
            iam.delete_policy(POLICY_ARN, client=self.client)
        self.assertEqual(context.exception.code, 'AccessDenied')
        self.client.delete_policy.assert_not_called()

    def test_policy_versions_paginate(self):
        self.client.list_policy_versions.side_effect = [
            {'Versions': [{'VersionId': 'v1'}], 'IsTruncated': True, 'Marker': 'page-2'},
            {'Versions': [{'VersionId': 'v2'}], 'IsTruncated': False},
        ]
        versions = [v['VersionId'] for v in iam.iter_policy_versions(POLICY_ARN, client=self.client)]
        self.assertEqual(versions, ['v1', 'v2'])
        self.assertEqual(self.client.list_policy_versions.call_args_list, [
            mock.call(PolicyArn=POLICY_ARN),
            mock.call(Marker='page-2', PolicyArn=POLICY_ARN),
        ])

    def test_detach_ignores_missing(self):
        self.client.detach_role_policy.side_effect = boto_error('NoSuchEntity', 'DetachRolePolicy')
        self.assertFalse(iam.detach_policy(POLICY_ARN, iam.TARGET_ROLE, 'my-role', client=self.client))
        self.client.detach_role_policy.assert_called_once_with(PolicyArn=POLICY_ARN, RoleName='my-role')

    def test_attach_group(self):
        iam.attach_policy(POLICY_ARN, iam.TARGET_GROUP, 'my-group', client=self.client)
        self.client.attach_group_policy.assert_called_once_with(PolicyArn=POLICY_ARN, GroupName='my-group')

    def test_policy_read_url_encoded_document(self):
        self.client.get_policy.return_value = {
            'Policy': {'Arn': POLICY_ARN, 'PolicyName': 'my-policy', 'DefaultVersionId': 'v2'}
        }
        self.client.get_policy_version.return_value = {
            'PolicyVersion': {
                'VersionId': 'v2',
                'Document': '%7B%22Version%22%3A%20%222012-10-17%22%2C%20%22Statement%22%3A%20%5B%5D%7D'
            }
        }
        policy = cobj.PolicyInstance('my-policy', arn=POLICY_ARN)
        policy.read(client=self.client)
        self.client.get_policy_version.assert_called_once_with(PolicyArn=POLICY_ARN, VersionId='v2')
        self.assertEqual(policy.policy_document, PolicyDocument([]))
        self.assertIsNone(policy.description)

    def test_update_role_without_document(self):
        iam.update_role(ROLE_ARN, 'New description', None, client=self.client)
        self.client.update_role.assert_called_once_with(RoleName='my-role', Description='New description')
        self.client.update_assume_role_policy.assert_not_called()

    def test_update_policy_without_document(self):
        with self.assertRaises(ValueError):
            iam.update_policy(POLICY_ARN, None, client=self.client)
        self.client.list_policy_versions.assert_not_called()
        self.client.delete_policy_version.assert_not_called()
        self.client.create_policy_version.assert_not_called()

    def test_error_traceback_ends_in_package(self):
        self.client.get_policy.side_effect = boto_error('NoSuchEntity', 'GetPolicy')
        with self.assertRaises(cobj.ClientError) as context:
            iam.get_policy(POLICY_ARN, client=self.client)
        tb = context.exception.__traceback__
        while tb.tb_next:
            tb = tb.tb_next
        self.assertIn('cloudobjects', tb.tb_frame.f_code.co_filename)
        self.assertEqual(tb.tb_frame.f_code.co_name, 'get_policy')

    def test_policy_arn_partition(self):
        identity = {'Account': '123456789012', 'Arn': 'arn:aws-cn:iam::123456789012:user/deployer'}
        with mock.patch('cloudobjects.sts.caller_identity', return_value=identity):
            self.assertEqual(str(iam.policy_arn('my-policy')),
                             'arn:aws-cn:iam::123456789012:policy/my-policy')


class SessionTests(unittest.TestCase):

    def test_session_is_shared(self):
        session = cobj.session()
        self.assertIs(cobj.session(), session)
        self.assertIs(iam.session, session)
        self.assertIs(cobj.sts.session, session)

    def test_set_session(self):
        session = boto3.session.Session(region_name='us-west-2')
        cobj.set_session(boto_session=session)
        self.assertIs(cobj.session(), session)
        self.assertIs(iam.session, session)
        self.assertIs(cobj.sts.session, session)


class CoreTests(unittest.TestCase):

    def test_map_parameters(self):
        self.assertEqual(map_parameters({'name': 'a', 'path': None}, {'name': 'RoleName', 'path': 'Path'}),
                         {'RoleName': 'a'})

    def test_iterate_without_marker(self):
        callback = mock.MagicMock(return_value={'Items': [1, 2]})
        self.assertEqual(list(iterate_through_paginated_items(callback, 'Items', 'Marker')), [1, 2])
        callback.assert_called_once_with()


if __name__ == '__main__':
    unittest.main()
