# -*- coding: utf-8 -*-
"""
Request schemas (pydantic)
"""
