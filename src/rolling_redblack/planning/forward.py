# Copyright 2025 iGenius S.p.A
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from rolling_redblack.config.registry import StageTypeRegistry
from rolling_redblack.config.request import (
    FULL_ROLLOUT,
    DeploymentRequest,
    require_pipeline_capability,
)
from rolling_redblack.helpers.logger import setup_logger
from rolling_redblack.planning.stages import StageSequence, base_context, pin_context
from rolling_redblack.platform.protocols import (
    DeferredReference,
    PipelineCapability,
    Plan,
    ResizeAction,
    ServerGroupSource,
    StageSpec,
    TargetServerGroup,
    to_jsonable,
)

logger = setup_logger(__name__)


def compose_after_stages(
    parent_id: str,
    request: DeploymentRequest,
    source: ServerGroupSource | None,
    registry: StageTypeRegistry,
    pipeline: PipelineCapability | None = None,
) -> Plan:
    """Build the rollout that runs once the new server group exists.

    The new group starts empty. For each target percentage it is grown to that
    share of the desired size, optionally validated, and the same share of
    traffic is disabled on the source group. The source group is pinned for
    the duration and finally either scaled down or unpinned.

    Without a source group (first deployment) only the resize steps are
    emitted, scaling to the saved capacity.

    Raises:
        ConfigurationError: the request configures a validation pipeline but
            `pipeline` is None.
    """
    require_pipeline_capability(request.pipeline_before_cleanup, pipeline)

    stages = StageSequence(parent_id)
    base = base_context(request)
    saved_capacity = request.saved_capacity

    stages.add(
        registry.determine_target,
        "Determine Deployed Server Group",
        {
            **base,
            "target": TargetServerGroup.current_asg_dynamic,
            "targetLocation": request.location,
        },
    )

    if source is None:
        logger.warning(
            "no source server group -- will perform RRB to exact fallback capacity "
            f"{saved_capacity} with no disableCluster or scaleDownCluster stages "
            f"[parentStageId={parent_id}]"
        )
    else:
        pin = pin_context(base, source, pinMinimumCapacity=True)
        stages.add(registry.pin, f"Pin {source.server_group_name}", pin)

    for p in request.target_percentages:
        resize = {
            **base,
            "target": TargetServerGroup.current_asg_dynamic,
            "targetLocation": request.location,
            "scalePct": p,
            # below 100% the new group is pinned at min == max == desired
            "pinCapacity": p < FULL_ROLLOUT,
            "unpinMinimumCapacity": p == FULL_ROLLOUT,
            "pinMinimumCapacity": p < FULL_ROLLOUT,
            "useNameAsLabel": True,
            "targetHealthyDeployPercentage": request.target_healthy_deploy_percentage,
        }
        if source is not None:
            resize["action"] = ResizeAction.scale_to_server_group
            resize["source"] = source
        else:
            resize["action"] = ResizeAction.scale_exact
            resize["capacity"] = saved_capacity

        logger.info(
            f"Adding `Grow to {p}% of Desired Size` stage with context "
            f"{to_jsonable(resize)} [parentStageId={parent_id}]"
        )
        resize_stage = stages.add(registry.resize, f"Grow to {p}% of Desired Size", resize)

        before_cleanup_stages(
            stages,
            request,
            registry,
            pipeline,
            source.server_group_name if source else None,
            DeferredReference(resize_stage.id, "asgName"),
            p,
        )

        if source is not None:
            disable = {
                **base,
                "desiredPercentage": p,
                "serverGroupName": source.server_group_name,
            }
            logger.info(
                f"Adding `Disable {p}% of Desired Size` stage with context "
                f"{to_jsonable(disable)} [parentStageId={parent_id}]"
            )
            stages.add(
                registry.disable,
                f"Disable {p}% of Traffic on {source.server_group_name}",
                disable,
            )

    if source is not None and request.scale_down:
        if request.delay_before_scale_down:
            stages.add(
                registry.wait,
                "Wait Before Scale Down",
                {"waitTime": request.delay_before_scale_down},
            )
        stages.add(
            registry.scale_down,
            "scaleDown",
            {
                **base,
                "allowScaleDownActive": False,
                "remainingFullSizeServerGroups": 1,
                "preferLargerOverNewer": False,
            },
        )
    elif source is not None:
        unpin = pin_context(base, source, unpinMinimumCapacity=True)
        stages.add(registry.pin, f"Unpin {source.server_group_name}", unpin)

    return stages.plan()


def before_cleanup_stages(
    stages: StageSequence,
    request: DeploymentRequest,
    registry: StageTypeRegistry,
    pipeline: PipelineCapability | None,
    source_server_group_name: str | None,
    deployed_server_group: DeferredReference,
    percentage_complete: int,
) -> list[StageSpec]:
    """Optional wait and validation pipeline after a traffic step.

    Both are independent: a configured delay adds a wait, a configured
    pipeline adds a run of it. Returns the stages added to `stages`.
    """
    added: list[StageSpec] = []

    if request.delay_before_cleanup:
        added.append(
            stages.add(registry.wait, "wait", {"waitTime": request.delay_before_cleanup})
        )

    pbc = request.pipeline_before_cleanup
    require_pipeline_capability(pbc, pipeline)
    if pipeline is not None and pbc is not None and pbc.is_configured:
        coordinates = {
            "region": request.location.value,
            "account": request.account or request.credentials,
            "cloudProvider": request.cloud_provider,
        }
        added.append(
            stages.add(
                pipeline.stage_type,
                "Run Validation Pipeline",
                {
                    "application": pbc.application,
                    "pipelineApplication": pbc.application,
                    "pipeline": pbc.pipeline_id,
                    "pipelineParameters": {
                        **pbc.pipeline_parameters,
                        "deployedServerGroup": {
                            **coordinates,
                            "serverGroupName": deployed_server_group,
                        },
                        "sourceServerGroup": {
                            **coordinates,
                            "serverGroupName": source_server_group_name,
                        },
                        "percentageComplete": percentage_complete,
                    },
                },
            )
        )

    return added
