"""Default stage handlers, wiring each stage name to its service."""

from __future__ import annotations

from collections.abc import Mapping

from shipline.core.errors import ErrorCode
from shipline.core.result import Err, Ok, Result
from shipline.git.repository import Repository
from shipline.output.errors import describe_release_error, describe_stage_error, stage_error_exit_code
from shipline.pipeline.model import StageName
from shipline.pipeline.runner import PostHook, RunContext, StageFailure, StageHandler
from shipline.services.artifact import ArtifactService
from shipline.services.build import BuildService
from shipline.services.cache import CacheService
from shipline.services.lint import LintService
from shipline.services.release.service import ReleaseService
from shipline.services.stage_errors import StageError
from shipline.services.toolchain import ToolchainService

_CACHE_KEY = "cache_key"


def _failure(error: StageError) -> StageFailure:
    message, hint = describe_stage_error(error)
    return StageFailure(message=message, hint=hint, code=stage_error_exit_code(error))


def toolchain_stage(ctx: RunContext) -> Result[str, StageFailure]:
    svc = ToolchainService(project=ctx.project, config=ctx.config, console=ctx.console)
    result = svc.setup(dry_run=ctx.dry_run)
    if isinstance(result, Err):
        return Err(_failure(result.error))
    return Ok("toolchain ready")


def cache_stage(ctx: RunContext) -> Result[str, StageFailure]:
    """Restore the build cache. Never fails the run: a miss means a cold build."""
    if not ctx.config.cache.enabled:
        return Ok("cache disabled")

    svc = CacheService(project=ctx.project, config=ctx.config, console=ctx.console)
    restored = svc.restore()
    if isinstance(restored, Err):
        ctx.console.warning(f"cache restore failed: {restored.error.reason}")
        ctx.values[_CACHE_KEY] = svc.cache_key()
        return Ok("cache unavailable, building cold")

    ctx.values[_CACHE_KEY] = restored.value.key
    if restored.value.hit:
        return Ok(f"cache hit ({restored.value.key})")
    return Ok(f"cache miss ({restored.value.key})")


def build_stage(ctx: RunContext) -> Result[str, StageFailure]:
    svc = BuildService(project=ctx.project, config=ctx.config, console=ctx.console)
    result = svc.build(dry_run=ctx.dry_run)
    if isinstance(result, Err):
        return Err(_failure(result.error))
    return Ok(f"built {result.value.relative_to(ctx.project.root)}")


def lint_stage(ctx: RunContext) -> Result[str, StageFailure]:
    svc = LintService(project=ctx.project, config=ctx.config, console=ctx.console)
    result = svc.lint(dry_run=ctx.dry_run)
    if isinstance(result, Err):
        return Err(_failure(result.error))
    return Ok("no diagnostics")


def artifact_stage(ctx: RunContext) -> Result[str, StageFailure]:
    svc = ArtifactService(project=ctx.project, config=ctx.config, console=ctx.console)
    result = svc.publish(run_id=ctx.run_id, dry_run=ctx.dry_run)
    if isinstance(result, Err):
        return Err(_failure(result.error))
    art = result.value
    if ctx.dry_run:
        return Ok(f"{art.name} (dry run)")
    return Ok(f"{art.name} -> {art.path} ({art.size} bytes, sha256 {art.sha256[:12]})")


def release_stage(ctx: RunContext) -> Result[str, StageFailure]:
    branch = ctx.plan.event.branch
    if branch is None:
        branch = Repository(ctx.project.root).current_branch()

    svc = ReleaseService(project=ctx.project, config=ctx.config, console=ctx.console, environ=ctx.environ)
    result = svc.release(branch=branch, dry_run=ctx.dry_run)
    if isinstance(result, Err):
        message, hint = describe_release_error(result.error)
        return Err(StageFailure(message=message, hint=hint, code=ErrorCode.RELEASE_ERROR))

    outcome = result.value
    if outcome.released:
        return Ok(f"released {outcome.tag}")
    if outcome.dry_run and outcome.tag:
        return Ok(f"would release {outcome.tag}")
    return Ok(f"no release: {outcome.reason}")


def save_cache_hook(ctx: RunContext, succeeded: bool) -> Result[str, StageFailure]:
    key = ctx.values.get(_CACHE_KEY)
    cache = ctx.config.cache
    if key is None or not cache.enabled or ctx.dry_run:
        return Ok("")
    if not succeeded and not cache.cache_on_failure:
        return Ok("cache not saved (run failed)")

    svc = CacheService(project=ctx.project, config=ctx.config, console=ctx.console)
    saved = svc.save(key)
    if isinstance(saved, Err):
        return Err(_failure(saved.error))
    return Ok(f"cache saved ({key})")


def default_handlers() -> Mapping[StageName, StageHandler]:
    return {
        "toolchain": toolchain_stage,
        "cache": cache_stage,
        "build": build_stage,
        "lint": lint_stage,
        "artifact": artifact_stage,
        "release": release_stage,
    }


def default_post_hooks() -> tuple[PostHook, ...]:
    return (save_cache_hook,)
