from dataclasses import dataclass
from typing import Any, List, Optional


@dataclass(frozen=True)
class Emission:
    event: str
    data: Any
    to: str
    skip_sid: Optional[str] = None


class Outbox:
    """Events produced while handling one inbound event, in emit order.

    The gateway flushes these to the transport; services never emit directly.
    """

    def __init__(self):
        self.emissions: List[Emission] = []

    def send(self, event: str, data: Any, connection_id: str) -> None:
        self.emissions.append(Emission(event, data, connection_id))

    def broadcast(self, event: str, data: Any, session, skip_sid: Optional[str] = None) -> None:
        self.emissions.append(Emission(event, data, session.channel, skip_sid))

    def __iter__(self):
        return iter(self.emissions)

    def __len__(self):
        return len(self.emissions)
