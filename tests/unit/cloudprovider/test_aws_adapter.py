"""Unit tests for the AWS EBS block storage adapter."""
import unittest
from unittest.mock import Mock, call

from botocore.exceptions import ClientError, EndpointConnectionError

from blockstore.aws import AWSBlockStorageAdapter, DEFAULT_IOPS_VOLUME_TYPES
from blockstore.errors import BlockStorageError, Internal, InvalidArgument, NotFound, Unavailable
from tests.test_utils import client_error

AZ = "us-east-1a"


class TestAWSBlockStorageAdapter(unittest.TestCase):
    """Test cases for AWS block storage adapter"""

    def setUp(self):
        """Set up test environment"""
        self.mock_ec2 = Mock()
        self.adapter = AWSBlockStorageAdapter(self.mock_ec2, AZ)

    def _describe_returns(self, *volumes):
        self.mock_ec2.describe_volumes.return_value = {"Volumes": list(volumes)}

    def test_default_iops_volume_types(self):
        """Test provisioned IOPS types are the default allow-set"""
        self.assertIn("io1", DEFAULT_IOPS_VOLUME_TYPES)
        self.assertNotIn("gp2", DEFAULT_IOPS_VOLUME_TYPES)
        self.assertIsInstance(self.adapter.iops_volume_types, frozenset)

    def test_create_volume_omits_iops_for_unsupported_type(self):
        """Test IOPS is dropped for volume types outside the allow-set"""
        self.mock_ec2.create_volume.return_value = {"VolumeId": "vol-new"}

        volume_id = self.adapter.create_volume_from_snapshot("snap-1", "gp2", 3000)

        self.assertEqual(volume_id, "vol-new")
        self.mock_ec2.create_volume.assert_called_once_with(
            SnapshotId="snap-1",
            AvailabilityZone=AZ,
            VolumeType="gp2",
        )

    def test_create_volume_includes_iops_for_io1(self):
        """Test IOPS is sent for provisioned IOPS volume types"""
        self.mock_ec2.create_volume.return_value = {"VolumeId": "vol-new"}

        self.adapter.create_volume_from_snapshot("snap-1", "io1", 3000)

        self.mock_ec2.create_volume.assert_called_once_with(
            SnapshotId="snap-1",
            AvailabilityZone=AZ,
            VolumeType="io1",
            Iops=3000,
        )

    def test_create_volume_omits_missing_iops(self):
        """Test no IOPS is sent when none was supplied"""
        self.mock_ec2.create_volume.return_value = {"VolumeId": "vol-new"}

        self.adapter.create_volume_from_snapshot("snap-1", "io1")

        self.assertNotIn("Iops", self.mock_ec2.create_volume.call_args.kwargs)

    def test_create_volume_custom_iops_types(self):
        """Test the allow-set can be configured per adapter"""
        adapter = AWSBlockStorageAdapter(self.mock_ec2, AZ, iops_volume_types=frozenset(["gp3"]))
        self.mock_ec2.create_volume.return_value = {"VolumeId": "vol-new"}

        adapter.create_volume_from_snapshot("snap-1", "gp3", 4000)

        self.assertEqual(self.mock_ec2.create_volume.call_args.kwargs["Iops"], 4000)

    def test_create_volume_unknown_snapshot(self):
        """Test an unknown snapshot raises NotFound"""
        self.mock_ec2.create_volume.side_effect = client_error("InvalidSnapshot.NotFound", "CreateVolume")

        with self.assertRaises(NotFound) as ctx:
            self.adapter.create_volume_from_snapshot("snap-missing", "gp2")

        self.assertIsInstance(ctx.exception.__cause__, ClientError)

    def test_create_volume_invalid_type(self):
        """Test an unsupported volume type raises InvalidArgument"""
        self.mock_ec2.create_volume.side_effect = client_error("InvalidParameterValue", "CreateVolume")

        with self.assertRaises(InvalidArgument):
            self.adapter.create_volume_from_snapshot("snap-1", "floppy")

    def test_get_volume_info_with_iops(self):
        """Test IOPS is reported for provisioned IOPS volumes"""
        self._describe_returns({"VolumeId": "vol-1", "VolumeType": "io1", "Iops": 3000})

        info = self.adapter.get_volume_info("vol-1")

        self.assertEqual(info, ("io1", 3000))
        self.assertEqual(info.volume_type, "io1")
        self.assertEqual(info.iops, 3000)
        self.mock_ec2.describe_volumes.assert_called_once_with(VolumeIds=["vol-1"])

    def test_get_volume_info_ignores_iops_for_other_types(self):
        """Test IOPS reported by EC2 for gp2 volumes is not returned"""
        self._describe_returns({"VolumeId": "vol-1", "VolumeType": "gp2", "Iops": 100})

        volume_type, iops = self.adapter.get_volume_info("vol-1")

        self.assertEqual(volume_type, "gp2")
        self.assertIsNone(iops)

    def test_get_volume_info_no_results(self):
        """Test zero volumes is an error, not an empty result"""
        self._describe_returns()

        with self.assertRaises(NotFound):
            self.adapter.get_volume_info("vol-1")

    def test_get_volume_info_multiple_results(self):
        """Test more than one volume is an error"""
        self._describe_returns({"VolumeType": "gp2"}, {"VolumeType": "io1"})

        with self.assertRaises(Internal) as ctx:
            self.adapter.get_volume_info("vol-1")

        self.assertIn("got 2", ctx.exception.message)

    def test_get_volume_info_unknown_volume(self):
        """Test EC2 not-found errors are translated"""
        self.mock_ec2.describe_volumes.side_effect = client_error("InvalidVolume.NotFound")

        with self.assertRaises(NotFound):
            self.adapter.get_volume_info("vol-missing")

    def test_is_volume_ready(self):
        """Test only the available state counts as ready"""
        self._describe_returns({"State": "available"})
        self.assertTrue(self.adapter.is_volume_ready("vol-1"))

        for state in ("creating", "in-use", "error"):
            self._describe_returns({"State": state})
            self.assertFalse(self.adapter.is_volume_ready("vol-1"))

    def test_is_volume_ready_requires_one_result(self):
        """Test readiness checks fail on zero or multiple volumes"""
        self._describe_returns()
        with self.assertRaises(BlockStorageError):
            self.adapter.is_volume_ready("vol-1")

        self._describe_returns({"State": "available"}, {"State": "available"})
        with self.assertRaises(BlockStorageError):
            self.adapter.is_volume_ready("vol-1")

    def test_is_volume_ready_transport_error(self):
        """Test connection failures surface as Unavailable"""
        self.mock_ec2.describe_volumes.side_effect = EndpointConnectionError(endpoint_url="https://ec2")

        with self.assertRaises(Unavailable):
            self.adapter.is_volume_ready("vol-1")

    def test_list_snapshots_builds_tag_filters(self):
        """Test each tag becomes one exact-match filter"""
        paginator = self.mock_ec2.get_paginator.return_value
        paginator.paginate.return_value = [
            {"Snapshots": [{"SnapshotId": "snap-1"}, {"SnapshotId": "snap-2"}]},
        ]

        result = self.adapter.list_snapshots({"env": "prod", "app": "db"})

        self.assertEqual(result, ["snap-1", "snap-2"])
        self.mock_ec2.get_paginator.assert_called_once_with("describe_snapshots")
        paginator.paginate.assert_called_once_with(
            OwnerIds=["self"],
            Filters=[
                {"Name": "tag:env", "Values": ["prod"]},
                {"Name": "tag:app", "Values": ["db"]},
            ],
        )

    def test_list_snapshots_prefixed_keys(self):
        """Test keys already carrying the tag: prefix are not prefixed again"""
        paginator = self.mock_ec2.get_paginator.return_value
        paginator.paginate.return_value = [{"Snapshots": []}]

        self.adapter.list_snapshots({"tag:env": "prod", "app": "db"})

        paginator.paginate.assert_called_once_with(
            OwnerIds=["self"],
            Filters=[
                {"Name": "tag:env", "Values": ["prod"]},
                {"Name": "tag:app", "Values": ["db"]},
            ],
        )

    def test_list_snapshots_all_pages(self):
        """Test ids from every page are returned"""
        self.mock_ec2.get_paginator.return_value.paginate.return_value = [
            {"Snapshots": [{"SnapshotId": "snap-1"}]},
            {"Snapshots": []},
            {"Snapshots": [{"SnapshotId": "snap-2"}]},
        ]

        self.assertEqual(self.adapter.list_snapshots({}), ["snap-1", "snap-2"])
        self.mock_ec2.get_paginator.return_value.paginate.assert_called_once_with(
            OwnerIds=["self"], Filters=[]
        )

    def test_create_snapshot_then_tags(self):
        """Test the snapshot is created first and tagged second"""
        self.mock_ec2.create_snapshot.return_value = {"SnapshotId": "snap-new"}

        snapshot_id = self.adapter.create_snapshot("vol-123", {"env": "prod"})

        self.assertEqual(snapshot_id, "snap-new")
        self.assertEqual(self.mock_ec2.mock_calls, [
            call.create_snapshot(VolumeId="vol-123"),
            call.create_tags(Resources=["snap-new"], Tags=[{"Key": "env", "Value": "prod"}]),
        ])

    def test_create_snapshot_without_tags(self):
        """Test no tagging call is made for an empty tag set"""
        self.mock_ec2.create_snapshot.return_value = {"SnapshotId": "snap-new"}

        self.assertEqual(self.adapter.create_snapshot("vol-123", {}), "snap-new")
        self.mock_ec2.create_tags.assert_not_called()

    def test_create_snapshot_tagging_failure(self):
        """Test a tagging failure is reported and the snapshot is kept"""
        self.mock_ec2.create_snapshot.return_value = {"SnapshotId": "snap-new"}
        self.mock_ec2.create_tags.side_effect = client_error("RequestLimitExceeded", "CreateTags")

        with self.assertRaises(Unavailable) as ctx:
            self.adapter.create_snapshot("vol-123", {"env": "prod"})

        self.assertEqual(ctx.exception.resource_id, "snap-new")
        self.mock_ec2.delete_snapshot.assert_not_called()

    def test_create_snapshot_unknown_volume(self):
        """Test snapshotting an unknown volume raises NotFound without tagging"""
        self.mock_ec2.create_snapshot.side_effect = client_error("InvalidVolume.NotFound", "CreateSnapshot")

        with self.assertRaises(NotFound):
            self.adapter.create_snapshot("vol-missing", {"env": "prod"})

        self.mock_ec2.create_tags.assert_not_called()

    def test_delete_snapshot(self):
        """Test delete is passed straight through"""
        self.adapter.delete_snapshot("snap-1")
        self.mock_ec2.delete_snapshot.assert_called_once_with(SnapshotId="snap-1")

    def test_delete_missing_snapshot(self):
        """Test deleting an absent snapshot raises NotFound"""
        self.mock_ec2.delete_snapshot.side_effect = client_error("InvalidSnapshot.NotFound", "DeleteSnapshot")

        with self.assertRaises(NotFound):
            self.adapter.delete_snapshot("snap-gone")


if __name__ == '__main__':
    unittest.main()
