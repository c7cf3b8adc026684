"""
fleetmesh 项目构建配置

Reconciles fleet-backed node groups with the scale requested by an autoscaler.
"""

from setuptools import setup, find_packages
import os

# 读取 README 文件
def read_readme():
    if not os.path.exists("README.md"):
        return ""
    with open("README.md", "r", encoding="utf-8") as fh:
        return fh.read()

# 读取依赖文件
def read_requirements(path="requirements.txt"):
    requirements = []
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as fh:
            requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]
    return requirements

setup(
    name="fleetmesh-core",
    version="0.1.0",
    author="Arsenal Team",
    description="Fleet reconciliation for autoscaled node groups - fleetmesh",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: System :: Clustering",
        "Topic :: System :: Distributed Computing",
    ],
    python_requires=">=3.9",
    install_requires=read_requirements(),
    extras_require={
        "dev": read_requirements("requirements-dev.txt"),
    },
    entry_points={
        "console_scripts": [
            "fleetmesh-autoscaler=fleetmesh.cli:main",
        ],
    },
    zip_safe=False,
    keywords=[
        "autoscaling",
        "juju",
        "ray",
        "cluster",
        "reconciliation",
    ],
)
