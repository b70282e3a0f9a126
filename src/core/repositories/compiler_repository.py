"""Abstract contract for descriptor compilation."""

from abc import ABC, abstractmethod


class DescriptorCompiler(ABC):
    """Turns a reference image into a binary tracking-target descriptor.

    Output bytes are not guaranteed to be stable across compiler versions.
    """

    name: str = "descriptor-compiler"

    @abstractmethod
    def compile(self, image: bytes) -> bytes:
        """Compile `image` into descriptor bytes.

        Raises:
            CompilationFailedError: If compilation fails or yields nothing
        """
