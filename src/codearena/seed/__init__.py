"""Idempotent startup data."""

from codearena.seed.bootstrap import bootstrap, ensure_admin_user, seed_sample_data

__all__ = ["bootstrap", "ensure_admin_user", "seed_sample_data"]
