"""Pydantic models for study logs, users and achievements"""
