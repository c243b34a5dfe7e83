from setuptools import find_packages, setup

setup(
    name='fe-analysis',
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    setup_requires=["pytest-runner"],
    tests_require=["pytest", "pytest-cov"],
    extras_require={"test": ["pytest", "pytest-cov"]},
    install_requires=[
        "PyYAML>=5.1",
        "pandas>=1.0.0",
        "benchbuild>=6.6.4",
        "plumbum>=1.6",
        "six>=1.15.0",
        "click>=8.0.0",
        "rich>=1.3.1",
        "pyeda>=0.28.0",
    ],
    entry_points={
        "console_scripts": [
            'fe-analysis = fe_analysis.tools.driver_fe:main',
        ]
    },
    python_requires='>=3.9'
)
