from enum import Enum


class ProductType(str, Enum):
    VSC = "vsc"
    GAP = "gap"
    TIRE = "tire"
    DENT = "dent"

    def __str__(self):
        return self.value


class VehicleEligibility(str, Enum):
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"

    def __str__(self):
        return self.value


class QuoteTag(str, Enum):
    BEST_VALUE = "Best Value"
    MOST_POPULAR = "Most Popular"
    DEALER_RECOMMENDED = "Dealer Recommended"

    def __str__(self):
        return self.value


class ProviderCallStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"

    def __str__(self):
        return self.value
