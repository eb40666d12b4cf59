"""Chillies transaction settlement."""
from chilli_ledger.config import BAG_BONUS_PER_BAG, COMMISSION_RATE, SERVICE_CHARGE_PER_BAG
from chilli_ledger.data_structures import Settlement


def calculate_chillies_transaction(number_of_bags, weight_kg, market_rate) -> Settlement:
    """Compute the five derived monetary fields of a trade.

    Inputs must already be validated as strictly positive; no bounds
    checking happens here.

    Args:
        number_of_bags: Number of bags brought in.
        weight_kg: Total weight in kilograms.
        market_rate: Market rate per kilogram.

    Returns:
        Settlement with total_earnings, commission, service_charge,
        total_charges and net_amount.
    """
    total_earnings = (weight_kg * market_rate) + (number_of_bags * BAG_BONUS_PER_BAG)
    commission = total_earnings * COMMISSION_RATE
    service_charge = number_of_bags * SERVICE_CHARGE_PER_BAG
    total_charges = commission + service_charge
    net_amount = total_earnings - total_charges
    return Settlement(
        total_earnings=total_earnings,
        commission=commission,
        service_charge=service_charge,
        total_charges=total_charges,
        net_amount=net_amount,
    )
