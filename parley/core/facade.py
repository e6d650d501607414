from parley.core.service.call import CallService


class ParleyCore:
    """Services exposed to the signaling handlers."""

    def __init__(self, call_service: CallService) -> None:
        self.calls = call_service
