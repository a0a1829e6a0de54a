from rover import config

bind = f"{config.HOST}:{config.PORT}"
wsgi_app = "wsgi:app"
workers = config.WORKERS
worker_class = "gthread"
threads = config.THREADS     # favicon fetches are mostly waiting on the network
timeout = 60
graceful_timeout = 30
keepalive = 5
accesslog = "-"
preload_app = True
