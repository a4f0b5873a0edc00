# -*- coding: utf-8 -*-
"""
Migration package: live Neo4j graph to offline batch-inserted store.

Contains property_coercer (dynamic values to typed arrays), schema_parser
(index/constraint descriptions), source_reader (driver records to model objects),
batch_inserter (offline store writer), store_importer (the four import stages) and
migration_processor (orchestrator and CLI).
"""
