import enum


class VisitType(str, enum.Enum):
    DAY_VISIT = "DAY_VISIT"
    OVERNIGHT_STAY = "OVERNIGHT_STAY"


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


# Statuses that hold a date+visit-type slot
ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    DEPOSIT_PAID = "DEPOSIT_PAID"
    FULLY_PAID = "FULLY_PAID"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"


class AdminRole(str, enum.Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    VIEWER = "VIEWER"


class OtpPurpose(str, enum.Enum):
    PHONE_VERIFY = "PHONE_VERIFY"      # subject: phone number
    BOOKING_CANCEL = "BOOKING_CANCEL"  # subject: booking reference
