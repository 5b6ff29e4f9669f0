"""
snmpwalk-server - SNMP v2c GetBulk walks over a small JSON HTTP API,
with optional Consul self-registration.
"""

__version__ = "1.0.0"
