"""
Quart application serving the aggregated indie trends report.
"""
import asyncio
import logging
from typing import Optional

from quart import Quart, jsonify, request
from quart_cors import cors

from ingestion.source_factory import create_extractors
from services.cache import ResponseCache
from services.config import Config, load_config
from services.rate_limiter import RateLimiter, client_identifier
from workflows.base import ReportPipeline
from workflows.aggregator import TrendAggregator

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests. Please slow down."


def create_app(
    config: Optional[Config] = None,
    *,
    aggregator: Optional[ReportPipeline] = None,
    cache: Optional[ResponseCache] = None,
    limiter: Optional[RateLimiter] = None,
) -> Quart:
    """
    Build the app. Collaborators are created from config unless injected.
    """
    # Explicit None checks: RateLimiter defines __len__, so an empty one is falsy
    if config is None:
        config = load_config()
    if aggregator is None:
        aggregator = TrendAggregator.from_extractors(create_extractors(config))
    if cache is None:
        cache = ResponseCache(
            ttl_seconds=config.cache.ttl_seconds,
            single_flight=config.cache.single_flight,
        )
    if limiter is None:
        limiter = RateLimiter(
            max_requests=config.rate_limit.max_requests,
            window_seconds=config.rate_limit.window_seconds,
        )

    app = Quart(__name__)
    app = cors(app)
    app.config["RADAR_CONFIG"] = config
    app.extensions["radar"] = {
        "aggregator": aggregator,
        "cache": cache,
        "limiter": limiter,
    }

    ttl = int(cache.ttl_seconds)
    cache_control = f"public, s-maxage={ttl}, stale-while-revalidate={ttl}"

    # ==================== Lifecycle ====================

    @app.before_serving
    async def start_sweeper():
        """Start the periodic rate-window sweep."""
        interval = config.rate_limit.sweep_interval_seconds
        app.extensions["radar"]["sweeper"] = asyncio.create_task(limiter.run_sweeper(interval))
        logger.info(f"Rate window sweeper started (every {interval}s)")

    @app.after_serving
    async def stop_sweeper():
        task = app.extensions["radar"].pop("sweeper", None)
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Rate window sweeper stopped")

    # ==================== API Routes ====================

    @app.route('/api/games')
    async def api_games():
        """Rate-limited, cached trends report."""
        client_id = client_identifier(request.headers)
        decision = limiter.check(client_id)

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {client_id}, resets in {decision.reset_in}s")
            response = jsonify({'error': RATE_LIMIT_MESSAGE, 'resetIn': decision.reset_in})
            response.status_code = 429
            response.headers['X-RateLimit-Limit'] = str(limiter.max_requests)
            response.headers['X-RateLimit-Remaining'] = '0'
            response.headers['Retry-After'] = str(decision.reset_in)
            return response

        report = await cache.get_or_load(aggregator.run)

        response = jsonify(report.to_dict())
        response.headers['X-RateLimit-Limit'] = str(limiter.max_requests)
        response.headers['X-RateLimit-Remaining'] = str(decision.remaining)
        response.headers['X-Cache'] = 'HIT' if report.served_from_cache else 'MISS'
        response.headers['Cache-Control'] = cache_control
        return response

    @app.route('/api/health')
    async def api_health():
        """Liveness plus cache and limiter state; not rate limited."""
        age = cache.age()
        return jsonify({
            'status': 'ok',
            'cache': {
                'populated': cache.get() is not None,
                'ageSeconds': round(age, 3) if age is not None else None,
            },
            'trackedClients': len(limiter),
        })

    return app
