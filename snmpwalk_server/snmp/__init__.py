"""
SNMP walk module.

架構：
    SnmpWalkEngine : pysnmp async GETBULK subtree walker
    envelope       : WalkOutcome → {"code":..., "data":...} JSON
"""
