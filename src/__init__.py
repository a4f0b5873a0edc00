# -*- coding: utf-8 -*-
"""
Graph store migrator source package.

Copies a live Neo4j graph (nodes, relationships, label indexes and uniqueness
constraints) into a fresh offline store through a batch-insertion path.
"""
