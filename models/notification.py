from dataclasses import dataclass


@dataclass
class Notification:
    title: str
    body: str
    severity: str   # 'info' | 'warning' | 'error'
    key: str = ""   # e.g. "recurring:5:2024-01-01" or "budget:Rent"
