#!/usr/bin/env python3
"""
Performance Monitor for the Resume Modifier

Tracks:
1. Durations of LLM calls, text extraction, PDF compilation and whole requests
2. Error counts per operation
3. Cache and task queue statistics
4. System resource utilization (psutil)

Metrics are sampled on demand, whenever the dashboard asks for them.
"""

import threading
import time
from collections import defaultdict, deque
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, Dict, List

import psutil

from cache_manager import get_cache_stats

MAX_SAMPLES_PER_OPERATION = 100


class PerformanceMonitor:
    """In-process performance bookkeeping"""

    def __init__(self, history_size: int = 1000):
        self.history_size = history_size
        self.metrics_history = deque(maxlen=history_size)
        self.response_times = defaultdict(list)
        self.error_counts = defaultdict(int)
        self.last_errors = {}
        self.start_time = datetime.now()
        self.lock = threading.RLock()

    def _collect_metrics(self) -> Dict[str, Any]:
        """Collect current system metrics"""
        from task_queue import get_queue_stats

        with self.lock:
            response_times = {op: list(times) for op, times in self.response_times.items()}
            errors = dict(self.error_counts)

        return {
            'timestamp': datetime.now().isoformat(),
            'system': self._get_system_metrics(),
            'cache': get_cache_stats(),
            'tasks': get_queue_stats(),
            'response_times': response_times,
            'errors': errors
        }

    def _get_system_metrics(self) -> Dict[str, Any]:
        """Get system resource metrics"""
        try:
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage('/')
            process = psutil.Process()

            return {
                'cpu_percent': psutil.cpu_percent(interval=None),
                'memory_percent': memory.percent,
                'memory_available_gb': memory.available / (1024**3),
                'disk_percent': disk.percent,
                'disk_free_gb': disk.free / (1024**3),
                'process_rss_mb': process.memory_info().rss / (1024**2)
            }
        except psutil.Error as e:
            return {'error': str(e)}

    def record_response_time(self, operation: str, duration: float):
        """Record response time for an operation"""
        with self.lock:
            times = self.response_times[operation]
            times.append(duration)
            if len(times) > MAX_SAMPLES_PER_OPERATION:
                self.response_times[operation] = times[-MAX_SAMPLES_PER_OPERATION:]

    def record_error(self, operation: str, error: str):
        """Record an error occurrence"""
        with self.lock:
            self.error_counts[operation] += 1
            self.last_errors[operation] = {
                'error': error,
                'timestamp': datetime.now().isoformat()
            }

    def get_current_metrics(self) -> Dict[str, Any]:
        """Sample metrics now and append them to the history"""
        metrics = self._collect_metrics()
        with self.lock:
            self.metrics_history.append(metrics)
        return metrics

    def get_metrics_history(self, hours: int = 24) -> List[Dict[str, Any]]:
        """Get metrics history for the last N hours"""
        cutoff = datetime.now() - timedelta(hours=hours)

        with self.lock:
            return [
                metrics for metrics in self.metrics_history
                if datetime.fromisoformat(metrics['timestamp']) >= cutoff
            ]

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get performance summary statistics"""
        with self.lock:
            avg_response_times = {}
            for operation, times in self.response_times.items():
                if times:
                    avg_response_times[operation] = {
                        'avg': sum(times) / len(times),
                        'min': min(times),
                        'max': max(times),
                        'count': len(times)
                    }
            error_summary = dict(self.error_counts)
            last_errors = dict(self.last_errors)

        return {
            'uptime_hours': (datetime.now() - self.start_time).total_seconds() / 3600,
            'avg_response_times': avg_response_times,
            'error_summary': error_summary,
            'last_errors': last_errors,
            'cache_hit_rate': get_cache_stats().get('hit_rate', 0.0),
            'recent_metrics_count': len(self.get_metrics_history(1)),
            'system_health': self._assess_system_health()
        }

    def _assess_system_health(self) -> Dict[str, str]:
        """Assess overall system health"""
        try:
            cpu_percent = psutil.cpu_percent(interval=None)
            memory = psutil.virtual_memory()
        except psutil.Error:
            return {'overall': 'unknown'}

        health = {
            'cpu': 'good' if cpu_percent < 80 else 'warning' if cpu_percent < 95 else 'critical',
            'memory': 'good' if memory.percent < 80 else 'warning' if memory.percent < 95 else 'critical',
            'overall': 'good'
        }

        if 'critical' in health.values():
            health['overall'] = 'critical'
        elif 'warning' in health.values():
            health['overall'] = 'warning'

        return health


# Global performance monitor instance
_performance_monitor = None


def get_performance_monitor() -> PerformanceMonitor:
    """Get the global performance monitor instance"""
    global _performance_monitor
    if _performance_monitor is None:
        _performance_monitor = PerformanceMonitor()
    return _performance_monitor


def record_operation_time(operation: str, duration: float):
    """Record operation duration"""
    get_performance_monitor().record_response_time(operation, duration)


def record_operation_error(operation: str, error: str):
    """Record operation error"""
    get_performance_monitor().record_error(operation, error)


@contextmanager
def timed(operation: str):
    """Record how long the wrapped block takes, or an error if it raises."""
    start = time.time()
    try:
        yield
    except Exception as e:
        record_operation_error(operation, str(e))
        raise
    record_operation_time(operation, time.time() - start)


def get_performance_dashboard_data() -> Dict[str, Any]:
    """Get data for performance dashboard"""
    monitor = get_performance_monitor()

    return {
        'current': monitor.get_current_metrics(),
        'summary': monitor.get_performance_summary(),
        'recent_history': monitor.get_metrics_history(1)
    }


# Seconds an operation may take on average before it is flagged
OPERATION_BUDGETS = {
    'llm_request': 30.0,
    'pdf_compilation': 15.0,
    'text_extraction': 5.0,
    'generate_request': 45.0
}
DEFAULT_BUDGET = 30.0


def create_performance_report() -> Dict[str, Any]:
    """Create a performance report with recommendations"""
    monitor = get_performance_monitor()
    summary = monitor.get_performance_summary()

    failure_rates = {}
    for operation, errors in summary['error_summary'].items():
        successes = summary['avg_response_times'].get(operation, {}).get('count', 0)
        failure_rates[operation] = errors / (errors + successes)

    history = monitor.get_metrics_history(24)
    rss_values = [m['system']['process_rss_mb'] for m in history if 'process_rss_mb' in m.get('system', {})]

    return {
        'report_timestamp': datetime.now().isoformat(),
        'summary': summary,
        'failure_rates': failure_rates,
        'process_memory_mb': {
            'first': rss_values[0] if rss_values else None,
            'last': rss_values[-1] if rss_values else None,
            'samples': len(rss_values)
        },
        'recommendations': _generate_recommendations(summary)
    }


def _generate_recommendations(summary: Dict[str, Any]) -> List[str]:
    """Turn a performance summary into human readable advice"""
    recommendations = []
    errors = summary.get('error_summary', {})

    for operation, times in summary.get('avg_response_times', {}).items():
        avg_time = times.get('avg', 0)
        if avg_time > OPERATION_BUDGETS.get(operation, DEFAULT_BUDGET):
            recommendations.append(f"Consider optimizing {operation} (avg: {avg_time:.1f}s)")

    if errors.get('llm_request', 0) > 5:
        recommendations.append("Repeated LLM failures - check the API key and provider quota")

    if errors.get('pdf_compilation', 0) > 5:
        recommendations.append("Repeated PDF compilation failures - check the LaTeX installation")

    if errors.get('text_extraction', 0) > 5:
        recommendations.append("Many uploads could not be read - ask users for text-based PDFs")

    llm_calls = summary.get('avg_response_times', {}).get('llm_request', {}).get('count', 0)
    if llm_calls >= 20 and summary.get('cache_hit_rate', 0.0) < 0.05:
        recommendations.append("LLM cache is rarely hit - raise CACHE_TTL_HOURS or disable the cache")

    if not recommendations:
        recommendations.append("System performance is within normal parameters")

    return recommendations
