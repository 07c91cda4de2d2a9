from setuptools import setup, find_packages

setup(
    name='flinkguard',
    version='0.1.0',
    packages=find_packages(exclude=['*.tests', '*.tests.*']),
    include_package_data=True,
    install_requires=[
        'typer[all]',
        'fastapi',
        'uvicorn',
        'kubernetes',
        'pydantic',
        'pyyaml',
        'jsonschema',
        'python-dotenv',
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx',
        ],
    },
    entry_points={
        'console_scripts': [
            'flinkguard=flinkguard.cli:app'
        ]
    },
    author='Your Name',
    description='Validating admission webhook and CLI for FlinkCluster resources',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
