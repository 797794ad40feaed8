"""Deployment scripts for Axelar Soroban contracts on Stellar."""
