from typing import Callable, Iterable, Iterator, NamedTuple, Optional, Tuple

# (public key, is_signer, is_writable)
AccountMeta = Tuple[str, bool, bool]


class Payload(NamedTuple):
    """An unsigned contract / program call."""

    target: str
    data: str  # 0x-prefixed hex
    value: int = 0
    accounts: Tuple[AccountMeta, ...] = ()

    @property
    def data_bytes(self) -> bytes:
        return bytes.fromhex(self.data[2:] if self.data.startswith("0x") else self.data)


class PayloadGenerator:
    """
    Lazily produces the unsigned payloads that implement one registration step.

    Payloads are only built when requested, so a consumer that stops after
    the first one never causes the rest to be built.
    """

    def __init__(self, description: str, build: Callable[[], Iterable[Payload]]):
        self.description = description
        self._build = build
        self._iterator: Optional[Iterator[Payload]] = None

    def next_payload(self) -> Optional[Payload]:
        if self._iterator is None:
            self._iterator = iter(self._build())
        return next(self._iterator, None)

    def __iter__(self) -> Iterator[Payload]:
        while True:
            payload = self.next_payload()
            if payload is None:
                return
            yield payload

    @classmethod
    def single(cls, description: str, build: Callable[[], Payload]) -> "PayloadGenerator":
        def _one():
            yield build()

        return cls(description=description, build=_one)

    def __repr__(self) -> str:
        return f"PayloadGenerator({self.description})"
