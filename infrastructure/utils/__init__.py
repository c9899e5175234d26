from infrastructure.utils.seeding import derive_seed, set_seed

__all__ = ["set_seed", "derive_seed"]
