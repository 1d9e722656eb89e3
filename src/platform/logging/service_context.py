"""
Service context for log lines.

Identifies which process emitted a line when several API instances share
one record store, e.g. `eventpulse@prod:web-2f9c`.
"""

from functools import lru_cache
import os


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'eventpulse')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostnames are unique per replica; fall back to the pid locally
    instance_id = os.getenv('INSTANCE_ID') or os.getenv('HOSTNAME', '')[:12] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance_id}'
