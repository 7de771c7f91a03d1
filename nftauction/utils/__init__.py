"""Shared helpers: logging, input validation, unit conversion"""
