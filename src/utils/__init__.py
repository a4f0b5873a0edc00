# -*- coding: utf-8 -*-
"""
Utilities package shared across the migration pipeline.

Contains logging setup, environment configuration, the source/destination data
model and the exception hierarchy.
"""
