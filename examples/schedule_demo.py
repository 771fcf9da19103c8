"""
Scheduled scale-up / scale-down demo

Runs both schedules through a CapacitySchedulerActor backed by the in-memory
control plane, showing APPLIED, SKIPPED_BUSY and SKIPPED_ALREADY_MATCHED.
"""

import ray

from scalemesh.core.actors import ActorConfig, CapacitySchedulerActor, EventCollectorActor
from scalemesh.core.config import build_scaler_config

CONFIG = {
    "controller": {"pool": "workers", "backend": "memory", "call_timeout": 5},
    "profiles": {
        "up": {"min_size": 2, "max_size": 10, "desired_size": 6},
        "down": {"min_size": 0, "max_size": 10, "desired_size": 0},
    },
    "schedules": {
        "up": {"cron": "cron(30 3 ? * MON-FRI *)", "description": "business hours"},
        "down": {"cron": "cron(30 13 ? * MON-FRI *)", "description": "off hours"},
    },
    "memory_pools": {"workers": {"min_size": 2, "max_size": 10, "desired_size": 6}},
}


def demo_schedules():
    print("=" * 60)
    print("Scheduled capacity demo")
    print("=" * 60)

    try:
        ray.init(address="auto", ignore_reinit_error=True)
        print("Connected to an existing Ray cluster")
    except Exception:
        ray.init(ignore_reinit_error=True)
        print("Started a local Ray cluster")

    config = build_scaler_config(CONFIG, environ={})
    collector = EventCollectorActor.remote(ActorConfig(name="demo-collector"))
    scheduler = CapacitySchedulerActor.remote(config, ActorConfig(name="demo-scheduler"), collector)

    try:
        print("\n1. Evening trigger: scale down")
        print("   ->", ray.get(scheduler.fire.remote("down"))["outcome"])

        print("\n2. Morning trigger fires while the pool is still converging")
        print("   ->", ray.get(scheduler.fire.remote("up"))["outcome"])

        print("\n3. Control plane finishes; duplicate evening trigger delivered")
        ray.get(scheduler.settle.remote("workers"))
        print("   ->", ray.get(scheduler.fire.remote("scale_down"))["outcome"])

        print("\n4. Morning trigger after convergence")
        print("   ->", ray.get(scheduler.fire.remote("up"))["outcome"])

        print("\nRecorded events:")
        for event in ray.get(collector.list_events.remote()):
            print(f"   {event['schedule']:>5}  {event['outcome']}")
    finally:
        ray.kill(scheduler, no_restart=True)
        ray.kill(collector, no_restart=True)
        ray.shutdown()


if __name__ == "__main__":
    demo_schedules()
