from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Data/hora UTC atual em ISO-8601 com milissegundos e sufixo Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
