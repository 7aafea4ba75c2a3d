"""Catalog domain - read-only trainer and service lookups used by the booking screens"""
