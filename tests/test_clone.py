"""Tests for the clone workflow."""

import pytest
from cloudherd.core.errors import ConvergenceTimeout
from cloudherd.orchestration.clone import CloneWorkflow, clone_name
from cloudherd.orchestration.images import ImageWorkflows
from cloudherd.orchestration.instances import InstanceWorkflows
from cloudherd.resources.instance import ComputeInstance
from factories import instance_description


@pytest.fixture
def source(ec2):
    ec2.add_instance(
        instance_description(
            "i-src",
            public_ip="3.3.3.3",
            instance_type="c5.xlarge",
            tags={"Name": "web", "env": "prod", "team": "core"},
            KeyName="deploy",
            SubnetId="subnet-1",
            SecurityGroups=[{"GroupId": "sg-1"}],
            IamInstanceProfile={"Arn": "arn:aws:iam::1:instance-profile/web"},
        )
    )
    return "i-src"


@pytest.fixture
def clone(ec2, settings):
    return CloneWorkflow(InstanceWorkflows(ec2, settings), ImageWorkflows(ec2, settings))


def addressed(ec2, instance_id="i-new1"):
    ec2.image_states("ami-0001", "available")
    ec2.then(instance_id, state="running", public_ip="7.7.7.7")


class TestClone:
    def test_snapshots_when_no_image_exists(self, ec2, clone, source, clock):
        ec2.image_states("ami-0001", "pending")
        addressed(ec2)

        result = clone.run(source)

        assert ec2.called("create_image") == [
            {"InstanceId": "i-src", "Name": "i-src", "NoReboot": False}
        ]
        assert ec2.called("run_instances")[0]["ImageId"] == "ami-0001"
        assert result.id == "i-new1"
        assert result.public_ip == "7.7.7.7"
        assert result.name == "web (cloned)"

    def test_reuses_existing_image(self, ec2, clone, source, clock):
        ec2.add_image("ami-old", "i-src")
        addressed(ec2)

        clone.run(source, reuse_image=True)

        assert ec2.called("create_image") == []
        assert ec2.called("run_instances")[0]["ImageId"] == "ami-old"

    def test_reuse_requested_but_no_image_snapshots_once(self, ec2, clone, source, clock):
        addressed(ec2)

        clone.run(source, reuse_image=True)

        assert len(ec2.called("create_image")) == 1

    def test_reused_pending_image_is_awaited(self, ec2, clone, source, clock):
        ec2.add_image("ami-old", "i-src", state="pending")
        ec2.image_states("ami-old", "pending", "pending", "available")
        addressed(ec2)

        clone.run(source, reuse_image=True)

        assert ec2.called("create_image") == []
        assert ec2.called("run_instances")[0]["ImageId"] == "ami-old"

    def test_launch_copies_source_placement(self, ec2, clone, source, clock):
        addressed(ec2)

        clone.run(source, no_reboot=True)

        assert ec2.called("create_image")[0]["NoReboot"] is True
        request = ec2.called("run_instances")[0]
        assert request["InstanceType"] == "c5.xlarge"
        assert request["KeyName"] == "deploy"
        assert request["SecurityGroupIds"] == ["sg-1"]
        assert request["SubnetId"] == "subnet-1"
        assert request["IamInstanceProfile"] == {"Arn": "arn:aws:iam::1:instance-profile/web"}

    def test_copy_tags_skips_name(self, ec2, clone, source, clock):
        addressed(ec2)

        result = clone.run(source, copy_tags=True)

        assert result.tags == {"Name": "web (cloned)", "env": "prod", "team": "core"}
        written = [tag["Key"] for call in ec2.called("create_tags") for tag in call["Tags"]]
        assert written.count("Name") == 1

    def test_copy_tags_skips_reserved_aws_keys(self, ec2, clone, clock):
        ec2.add_instance(
            instance_description(
                "i-stack",
                tags={"Name": "api", "aws:cloudformation:stack-name": "prod", "env": "prod"},
            )
        )
        addressed(ec2)

        result = clone.run("i-stack", copy_tags=True)

        written = [tag["Key"] for call in ec2.called("create_tags") for tag in call["Tags"]]
        assert written == ["Name", "env"]
        assert result.tags == {"Name": "api (cloned)", "env": "prod"}

    def test_without_copy_tags_only_name_is_set(self, ec2, clone, source, clock):
        addressed(ec2)

        result = clone.run(source)

        assert result.tags == {"Name": "web (cloned)"}

    def test_explicit_name(self, ec2, clone, source, clock):
        addressed(ec2)

        result = clone.run(source, name="web-canary")

        assert result.name == "web-canary"

    def test_image_timeout_aborts_before_launch(self, ec2, clone, source, clock):
        ec2.image_states("ami-0001", *(["pending"] * 2000))

        with pytest.raises(ConvergenceTimeout):
            clone.run(source)

        assert ec2.called("run_instances") == []


def test_clone_name_falls_back_to_id(ec2):
    unnamed = ComputeInstance(ec2, instance_description("i-9"))

    assert clone_name(unnamed) == "i-9 (cloned)"
