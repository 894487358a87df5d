from flightsurety.escrow.insurance import InsuranceEscrow

__all__ = ["InsuranceEscrow"]
