# salat_engine/metrics.py

from prometheus_client import Counter, Histogram

# Define Prometheus metrics

# Cache Metrics
CACHE_HITS = Counter('salat_engine_cache_hits_total', 'Total prayer cache hits', ['cache_type', 'method'])
CACHE_MISSES = Counter('salat_engine_cache_misses_total', 'Total prayer cache misses', ['cache_type', 'method'])
CACHE_ERRORS = Counter('salat_engine_cache_errors_total', 'Cache store failures downgraded to misses', ['cache_type', 'operation'])

# Solver Metrics
SOLVE_FAILURES_TOTAL = Counter('salat_engine_solve_failures_total', 'Solves that ended in a calculation error', ['method', 'reason'])

# Background Task Metrics
BACKGROUND_TASK_RUNS_TOTAL = Counter('salat_engine_background_task_runs_total', 'Total background task runs', ['task_name', 'status'])
BACKGROUND_TASK_DURATION_SECONDS = Histogram('salat_engine_background_task_duration_seconds', 'Background task duration in seconds', ['task_name'])
