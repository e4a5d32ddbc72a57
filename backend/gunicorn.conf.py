import multiprocessing
import os

# Every student operation holds one checkpoint row lock for the length of a request,
# so keep workers * threads within Postgres max_connections
workers = int(os.environ.get('GUNICORN_WORKERS', min(multiprocessing.cpu_count() * 2 + 1, 9)))
worker_class = 'gthread'
threads = int(os.environ.get('GUNICORN_THREADS', 4))

max_requests = 1000
max_requests_jitter = 50

timeout = 60
graceful_timeout = 30
keepalive = 5

accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('GUNICORN_LOG_LEVEL', 'warning')

bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')
wsgi_app = 'config.wsgi:application'
