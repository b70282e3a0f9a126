"""Descriptor compiler backends and the factory that selects one from config.

Backends:
- passthrough: returns the image bytes unchanged (development stub)
- remote: POSTs the image to an HTTP compiler service
- command: runs an external compiler executable over temporary files
"""

import shlex
import subprocess
import tempfile
from pathlib import Path

import requests
from aws_lambda_powertools import Logger

from core.models.errors import CompilationFailedError
from core.repositories.compiler_repository import DescriptorCompiler
from core.utils.config import ServiceConfig, get_config
from core.utils.constants import (
    COMPILER_COMMAND,
    COMPILER_PASSTHROUGH,
    COMPILER_REMOTE,
    DESCRIPTOR_CONTENT_TYPE,
    ENV_DESCRIPTOR_COMPILER_COMMAND,
    ENV_DESCRIPTOR_COMPILER_URL,
)

logger = Logger(UTC=True)


class PassthroughCompiler(DescriptorCompiler):
    """Stores the image itself as the descriptor. Not trackable by AR clients."""

    name = COMPILER_PASSTHROUGH

    def compile(self, image: bytes) -> bytes:
        if not image:
            raise CompilationFailedError(message="Cannot compile an empty image")

        logger.warning(
            "Passthrough compiler in use; descriptor is a copy of the image",
            extra={"size": len(image)},
        )
        return bytes(image)


class RemoteDescriptorCompiler(DescriptorCompiler):
    """Delegates compilation to an HTTP service.

    The image is sent as the raw request body; the response body is the
    descriptor.
    """

    name = COMPILER_REMOTE

    def __init__(
        self,
        url: str,
        *,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

    def compile(self, image: bytes) -> bytes:
        logger.debug("Requesting remote compilation", extra={"url": self._url, "size": len(image)})

        try:
            response = self._session.post(
                self._url,
                data=image,
                headers={"Content-Type": DESCRIPTOR_CONTENT_TYPE},
                timeout=self._timeout,
            )
            response.raise_for_status()

        except requests.RequestException as exc:
            logger.error("Remote compilation failed", extra={"url": self._url, "error": str(exc)})
            raise CompilationFailedError(
                message="Descriptor compilation failed",
                details={"backend": self.name, "reason": str(exc)},
            ) from exc

        descriptor = response.content
        if not descriptor:
            raise CompilationFailedError(
                message="Descriptor compiler returned an empty result",
                details={"backend": self.name},
            )

        logger.info("Remote compilation succeeded", extra={"size": len(descriptor)})
        return descriptor


class CommandDescriptorCompiler(DescriptorCompiler):
    """Runs an external compiler, e.g. `node compile-mind.js {input} {output}`.

    `{input}` is replaced by the image path and `{output}` by the path the
    compiler must write the descriptor to.
    """

    name = COMPILER_COMMAND

    def __init__(self, command: str, *, timeout: float | None = None) -> None:
        self._argv = shlex.split(command)
        if not self._argv:
            raise ValueError("Descriptor compiler command is empty")
        self._timeout = timeout

    def compile(self, image: bytes) -> bytes:
        with tempfile.TemporaryDirectory(prefix="mind-") as workdir:
            input_path = Path(workdir) / "target-image"
            output_path = Path(workdir) / "target.mind"
            input_path.write_bytes(image)

            argv = [
                arg.replace("{input}", str(input_path)).replace("{output}", str(output_path))
                for arg in self._argv
            ]

            try:
                subprocess.run(
                    argv,
                    check=True,
                    capture_output=True,
                    timeout=self._timeout,
                )

            except subprocess.CalledProcessError as exc:
                stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
                logger.error(
                    "Compiler command failed",
                    extra={"returncode": exc.returncode, "stderr": stderr[-2000:]},
                )
                raise CompilationFailedError(
                    message="Descriptor compilation failed",
                    details={"backend": self.name, "returncode": exc.returncode},
                ) from exc

            except (OSError, subprocess.TimeoutExpired) as exc:
                logger.error("Compiler command could not run", extra={"error": str(exc)})
                raise CompilationFailedError(
                    message="Descriptor compilation failed",
                    details={"backend": self.name, "reason": str(exc)},
                ) from exc

            if not output_path.exists() or output_path.stat().st_size == 0:
                raise CompilationFailedError(
                    message="Descriptor compiler produced no output",
                    details={"backend": self.name},
                )

            return output_path.read_bytes()


def build_descriptor_compiler(config: ServiceConfig | None = None) -> DescriptorCompiler:
    """Create the compiler backend named by `DESCRIPTOR_COMPILER`.

    Raises:
        RuntimeError: If the backend is unknown or its settings are missing
    """
    config = config or get_config()
    backend = config.compiler_backend

    if backend == COMPILER_PASSTHROUGH:
        return PassthroughCompiler()

    if backend == COMPILER_REMOTE:
        return RemoteDescriptorCompiler(
            config.require(config.compiler_url, ENV_DESCRIPTOR_COMPILER_URL),
            timeout=config.compiler_timeout,
        )

    if backend == COMPILER_COMMAND:
        return CommandDescriptorCompiler(
            config.require(config.compiler_command, ENV_DESCRIPTOR_COMPILER_COMMAND),
            timeout=config.compiler_timeout,
        )

    raise RuntimeError(f"Unknown descriptor compiler backend: {backend!r}")
