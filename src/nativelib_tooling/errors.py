"""Pipeline error taxonomy. Every error names the target it failed for."""

from __future__ import annotations


class PipelineError(RuntimeError):
    """Fatal to its own target/row. Carries a stable code, the target label and an optional hint."""

    code = "E_PIPELINE"

    def __init__(self, message: str, *, target: str | None = None, hint: str | None = None) -> None:
        super().__init__(message)
        self.target = target
        self.hint = hint

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)

    def describe(self) -> str:
        """One operator-facing line: [target] code: message."""
        where = f"[{self.target}] " if self.target else ""
        return f"{where}{self.code}: {self}"


class UnsupportedPlatform(PipelineError):
    code = "E_UNSUPPORTED_PLATFORM"


class ToolchainNotFound(PipelineError):
    code = "E_TOOLCHAIN_NOT_FOUND"


class AliasSetupFailed(PipelineError):
    code = "E_ALIAS_SETUP_FAILED"


class BuildFailed(PipelineError):
    code = "E_BUILD_FAILED"

    def __init__(
        self,
        message: str,
        *,
        returncode: int,
        target: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, target=target, hint=hint)
        self.returncode = returncode


class ArtifactNotFound(PipelineError):
    code = "E_ARTIFACT_NOT_FOUND"


class UploadRejected(PipelineError):
    code = "E_UPLOAD_REJECTED"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        target: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, target=target, hint=hint)
        self.status = status


class ConfigError(ValueError):
    """Invalid release configuration (matrix file, unknown family, duplicate artifact names)."""


__all__ = [
    "AliasSetupFailed",
    "ArtifactNotFound",
    "BuildFailed",
    "ConfigError",
    "PipelineError",
    "ToolchainNotFound",
    "UnsupportedPlatform",
    "UploadRejected",
]
