# -*- coding: utf-8 -*-
"""
Services Package
Business rules and outbound integrations
"""
