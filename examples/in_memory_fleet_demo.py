"""
In-memory fleet 演示

演示 FleetManager/NodeGroup 如何处理扩容、缩容，以及运维人员在自动扩缩容之外手动增删的 unit
"""

import logging

from fleetmesh.core import build_cloud_provider
from fleetmesh.core.clients import InMemoryFleetClient
from fleetmesh.core.utils import install_stdout_logger

GROUP_ID = "juju-default-kubernetes-worker"


def show(provider, title):
    group = provider.get_node_group(GROUP_ID)
    print(f"\n--- {title} ---")
    print(group.debug())
    for node in sorted(group.nodes(), key=lambda n: n.id):
        print(f"  {node.id:<40} {node.state.value}")


def demo_fleet_lifecycle():
    print("=" * 60)
    print("Fleet 生命周期演示")
    print("=" * 60)

    fleet = InMemoryFleetClient(hostname_prefix="worker")
    for _ in range(2):
        fleet.inject_unit("kubernetes-worker")

    provider = build_cloud_provider(["1:5:default:kubernetes-worker"], lambda model: fleet)
    group = provider.get_node_group(GROUP_ID)
    show(provider, "1️⃣  初始状态")

    group.increase_size(2)
    show(provider, "2️⃣  扩容请求已提交 (新 unit 仍在创建中)")

    fleet.settle()
    provider.refresh()
    show(provider, "3️⃣  新 unit 就绪")

    group.delete_nodes(["worker-0"])
    show(provider, "4️⃣  缩容 worker-0")

    fleet.inject_unit("kubernetes-worker")
    fleet.drop_unit("kubernetes-worker/1")
    fleet.settle()
    provider.refresh()
    show(provider, "5️⃣  运维手动增删 unit 后的对账结果")


if __name__ == "__main__":
    install_stdout_logger(logging.INFO, include_timestamp=False)
    demo_fleet_lifecycle()
