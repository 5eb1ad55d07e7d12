"""Will Engine - Services"""
