"""AWS provisioning backend: SageMaker endpoints, EventBridge Scheduler, IAM, SSM."""

import asyncio
import json
from datetime import UTC, datetime, time
from typing import Any, Callable, Optional, TypeVar

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from model_fleet.core.config import Settings
from model_fleet.core.errors import ProvisioningError, SchedulerRoleError
from model_fleet.core.logging import structured_log
from model_fleet.core.telemetry import span
from model_fleet.models.entities import DeploymentRequest, ProvisionedEndpoint, ResolvedEndpoint
from model_fleet.services.base_provider import BaseFleetProvider, ScheduleAction
from model_fleet.services.endpoint_naming import prefixed

T = TypeVar("T")

# AWS Deep Learning Containers registry (most commercial regions)
DLC_ACCOUNT_ID = "763104351884"
# SSM picks Standard or Advanced by value size and never downgrades an existing parameter
SSM_PARAMETER_TIER = "Intelligent-Tiering"
SAGEMAKER_FULL_ACCESS_POLICY = "arn:aws:iam::aws:policy/AmazonSageMakerFullAccess"

# EventBridge Scheduler universal targets
SCHEDULE_TARGETS: dict[str, str] = {
    "start": "arn:aws:scheduler:::aws-sdk:sagemaker:createEndpoint",
    "stop": "arn:aws:scheduler:::aws-sdk:sagemaker:deleteEndpoint",
}

SCHEDULER_TRUST_POLICY = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Effect": "Allow",
            "Principal": {"Service": "scheduler.amazonaws.com"},
            "Action": "sts:AssumeRole",
        }
    ],
}


def _error_code(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


def _is_not_found(exc: Exception) -> bool:
    """SageMaker reports missing resources as ValidationException 'Could not find ...'."""
    if not isinstance(exc, ClientError):
        return False
    code = _error_code(exc)
    message = exc.response.get("Error", {}).get("Message", "")
    if code in {"ResourceNotFound", "ResourceNotFoundException", "NoSuchEntity", "ParameterNotFound"}:
        return True
    return code == "ValidationException" and "could not find" in message.lower()


def image_uri(container_image: str, region: str) -> str:
    """Full ECR URI of a Deep Learning Container given as ``repository:tag``."""
    return f"{DLC_ACCOUNT_ID}.dkr.ecr.{region}.amazonaws.com/{container_image}"


def model_tags(request: DeploymentRequest) -> list[dict[str, str]]:
    d = request.descriptor
    tags = [
        {"Key": "model-fleet:model-id", "Value": d.model_id},
        {"Key": "model-fleet:source", "Value": d.source},
    ]
    if d.jumpstart_model:
        tags.append({"Key": "model-fleet:jumpstart-model", "Value": d.jumpstart_model})
    if d.accept_eula:
        tags.append({"Key": "model-fleet:accept-eula", "Value": "true"})
    return tags


class SageMakerProvider(BaseFleetProvider):
    """
    boto3-backed provider.

    SageMaker models, endpoint configs and endpoints are described first and
    reused as-is when they exist; a changed environment needs a new endpoint
    name. Schedules are created or updated in place.
    """

    def __init__(
        self,
        region: str,
        *,
        prefix: str = "",
        max_attempts: int = 5,
        session: Optional[boto3.session.Session] = None,
        clients: Optional[dict[str, Any]] = None,
    ) -> None:
        self.region = region
        self.prefix = prefix
        self._session = session or boto3.session.Session(region_name=region)
        self._config = Config(region_name=region, retries={"mode": "standard", "max_attempts": max_attempts})
        self._clients: dict[str, Any] = dict(clients or {})

    @classmethod
    def from_settings(cls, settings: Settings) -> "SageMakerProvider":
        return cls(settings.aws_region, prefix=settings.prefix, max_attempts=settings.aws_max_attempts)

    def client(self, service_name: str) -> Any:
        """Get or create a cached boto3 client."""
        if service_name not in self._clients:
            self._clients[service_name] = self._session.client(service_name, config=self._config)
        return self._clients[service_name]

    async def _call(self, operation: str, fn: Callable[[], T], **attributes: Any) -> T:
        """Run a blocking boto3 call in a worker thread, mapping AWS errors to ProvisioningError."""
        with span(f"aws.{operation}", attributes):
            try:
                return await asyncio.to_thread(fn)
            except ProvisioningError:
                raise
            except (ClientError, BotoCoreError) as exc:
                raise ProvisioningError(
                    f"{operation} failed: {exc}",
                    details={"operation": operation, "aws_error_code": _error_code(exc), **attributes},
                ) from exc

    # --- Endpoints ---

    async def create_model_endpoint(self, request: DeploymentRequest) -> ProvisionedEndpoint:
        return await self._call(
            "create_model_endpoint",
            lambda: self._create_model_endpoint(request),
            model_id=request.model_id,
            name=request.name,
        )

    def _create_model_endpoint(self, request: DeploymentRequest) -> ProvisionedEndpoint:
        sm = self.client("sagemaker")
        d = request.descriptor
        name = prefixed(self.prefix, request.name)
        tags = model_tags(request)

        if not self._exists(lambda: sm.describe_model(ModelName=name)):
            if not request.shared.execution_role_arn:
                raise ProvisioningError(
                    "endpoint_execution_role_arn is required to create SageMaker models",
                    status_code=400,
                    details={"model_id": d.model_id},
                )
            model_args: dict[str, Any] = {
                "ModelName": name,
                "PrimaryContainer": {
                    "Image": image_uri(d.container_image, self.region),
                    "Environment": dict(request.environment),
                },
                "ExecutionRoleArn": request.shared.execution_role_arn,
                "Tags": tags,
            }
            if request.shared.has_vpc:
                model_args["VpcConfig"] = {
                    "SecurityGroupIds": list(request.shared.security_group_ids),
                    "Subnets": list(request.shared.subnet_ids),
                }
            sm.create_model(**model_args)
            structured_log("INFO", "SageMaker model created", model_id=d.model_id, operation="aws.create_model")

        if not self._exists(lambda: sm.describe_endpoint_config(EndpointConfigName=name)):
            config_args: dict[str, Any] = {
                "EndpointConfigName": name,
                "ProductionVariants": [
                    {
                        "VariantName": "AllTraffic",
                        "ModelName": name,
                        "InitialInstanceCount": 1,
                        "InstanceType": d.compute_class,
                        "ContainerStartupHealthCheckTimeoutInSeconds": d.startup_timeout_seconds,
                    }
                ],
                "Tags": tags,
            }
            if request.shared.kms_key_id:
                config_args["KmsKeyId"] = request.shared.kms_key_id
            sm.create_endpoint_config(**config_args)

        try:
            existing = sm.describe_endpoint(EndpointName=name)
            arn = existing["EndpointArn"]
            structured_log(
                "INFO",
                "SageMaker endpoint exists; reusing",
                model_id=d.model_id,
                operation="aws.create_endpoint",
                metadata={"status": existing.get("EndpointStatus")},
            )
        except ClientError as exc:
            if not _is_not_found(exc):
                raise
            arn = sm.create_endpoint(EndpointName=name, EndpointConfigName=name, Tags=tags)["EndpointArn"]
            structured_log("INFO", "SageMaker endpoint created", model_id=d.model_id, operation="aws.create_endpoint")
        return ProvisionedEndpoint(handle=arn, endpoint_name=name, endpoint_config_name=name)

    @staticmethod
    def _exists(describe: Callable[[], Any]) -> bool:
        try:
            describe()
            return True
        except ClientError as exc:
            if _is_not_found(exc):
                return False
            raise

    # --- Registry document ---

    async def put_registry_document(self, name: str, document: str) -> None:
        await self._call(
            "put_parameter",
            lambda: self.client("ssm").put_parameter(
                Name=name,
                Value=document,
                Type="String",
                Overwrite=True,
                Tier=SSM_PARAMETER_TIER,
            ),
            parameter=name,
            tier=SSM_PARAMETER_TIER,
        )

    async def get_registry_document(self, name: str) -> Optional[str]:
        def _get() -> Optional[str]:
            try:
                return self.client("ssm").get_parameter(Name=name)["Parameter"]["Value"]
            except ClientError as exc:
                if _is_not_found(exc):
                    return None
                raise

        return await self._call("get_parameter", _get, parameter=name)

    # --- Scheduler ---

    async def ensure_scheduler_role(self, role_name: str) -> str:
        try:
            return await self._call("ensure_scheduler_role", lambda: self._ensure_role(role_name), role=role_name)
        except ProvisioningError as exc:
            raise SchedulerRoleError(role_name, exc.message) from exc

    def _ensure_role(self, role_name: str) -> str:
        iam = self.client("iam")
        try:
            return iam.get_role(RoleName=role_name)["Role"]["Arn"]
        except ClientError as exc:
            if not _is_not_found(exc):
                raise
        arn = iam.create_role(
            RoleName=role_name,
            AssumeRolePolicyDocument=json.dumps(SCHEDULER_TRUST_POLICY),
            Description="Role for Scheduler to interact with SageMaker",
        )["Role"]["Arn"]
        iam.attach_role_policy(RoleName=role_name, PolicyArn=SAGEMAKER_FULL_ACCESS_POLICY)
        structured_log("INFO", "Scheduler role created", operation="aws.create_role", metadata={"role": role_name})
        return arn

    async def upsert_schedule(
        self,
        name: str,
        action: ScheduleAction,
        expression: str,
        endpoint: ResolvedEndpoint,
        role_arn: str,
        *,
        timezone: str = "UTC",
        end_date: Optional[str] = None,
    ) -> str:
        return await self._call(
            "upsert_schedule",
            lambda: self._upsert_schedule(name, action, expression, endpoint, role_arn, timezone, end_date),
            schedule=name,
            action=action,
        )

    def _upsert_schedule(
        self,
        name: str,
        action: ScheduleAction,
        expression: str,
        endpoint: ResolvedEndpoint,
        role_arn: str,
        timezone: str,
        end_date: Optional[str],
    ) -> str:
        target_input: dict[str, str] = {"EndpointName": endpoint.endpoint_name}
        if action == "start":
            target_input["EndpointConfigName"] = endpoint.endpoint_config_name
        args: dict[str, Any] = {
            "Name": name,
            "ScheduleExpression": expression,
            "ScheduleExpressionTimezone": timezone,
            "FlexibleTimeWindow": {"Mode": "OFF"},
            "State": "ENABLED",
            "Target": {
                "Arn": SCHEDULE_TARGETS[action],
                "RoleArn": role_arn,
                "Input": json.dumps(target_input),
            },
        }
        if end_date:
            args["EndDate"] = datetime.combine(datetime.fromisoformat(end_date).date(), time.max, tzinfo=UTC)
        scheduler = self.client("scheduler")
        try:
            return scheduler.create_schedule(**args)["ScheduleArn"]
        except ClientError as exc:
            if _error_code(exc) != "ConflictException":
                raise
        return scheduler.update_schedule(**args)["ScheduleArn"]
