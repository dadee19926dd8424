"""Shared utilities: configuration, logging, caching and numeric helpers"""
