from .addon_registration import AddonRegistrationUseCase, RegistrationResult
from .stream_aggregation import StreamAggregationUseCase

__all__ = ["AddonRegistrationUseCase", "RegistrationResult", "StreamAggregationUseCase"]
