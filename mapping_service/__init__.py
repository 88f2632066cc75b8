"""Crosswalk between legacy record ids and new-system ids."""
