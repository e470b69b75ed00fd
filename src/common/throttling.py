from ninja_extra.throttling import AnonRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    rate = "120/min"


class RegistrationThrottle(AnonRateThrottle):
    rate = "30/min"


class WriteThrottle(AnonRateThrottle):
    rate = "100/min"


class CheckInThrottle(AnonRateThrottle):
    rate = "300/min"
