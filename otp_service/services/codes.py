import secrets


class CodeGenerator:
    def __init__(self, length: int = 6) -> None:
        if length < 1:
            raise ValueError("Code length must be positive")
        self._length = length

    @property
    def length(self) -> int:
        return self._length

    def generate(self) -> str:
        # Each digit is drawn independently from the OS CSPRNG.
        return "".join(str(secrets.randbelow(10)) for _ in range(self._length))
