"""Admission control and retry for outbound requests.

Fault tolerance and throttling around the network transport:
- AdmissionGate: Bounds requests in flight
- WindowLimiter: Bounds requests per time window
- ThrottledTransport: Applies both before every network call
- RetryingTransport: Exponential backoff with jitter on transient statuses
"""

from .admission import AdmissionGate
from .backoff import BackoffPolicy, ExponentialBackoff
from .retry import RetryingTransport, is_success_status, is_transient_status
from .throttle import ThrottledTransport
from .window import WindowLimiter

__all__ = [
    "AdmissionGate",
    "BackoffPolicy",
    "ExponentialBackoff",
    "RetryingTransport",
    "ThrottledTransport",
    "WindowLimiter",
    "is_success_status",
    "is_transient_status",
]
