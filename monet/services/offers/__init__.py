"""Offer reporting and candidate decisions."""

from monet.services.offers.offer_service import OfferReport, OfferService


__all__ = ["OfferReport", "OfferService"]
