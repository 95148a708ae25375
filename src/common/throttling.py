from ninja_extra.throttling import AnonRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    rate = "60/min"


class WriteThrottle(AnonRateThrottle):
    scope = "write"
    rate = "30/min"


class ClaimThrottle(AnonRateThrottle):
    scope = "claim"
    rate = "20/min"
