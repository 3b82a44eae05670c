from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf8") as long_desc_fd:
    long_description = long_desc_fd.read()

with open('version', 'r') as version_fd:
    version = version_fd.read().strip('\n')

requirements = []

with open('requirements.txt', 'r') as requirements_fd:
    for requirement in requirements_fd:
        # skip empty lines
        requirement = requirement.strip()

        if requirement:
            requirements.append(requirement)

setup(
    name="statica",
    version=version,
    description="Static files server that keeps files in memory and re-reads them when they change",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['statica', 'statica.*']),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        'test': ['pytest']
    },
    entry_points={
        'console_scripts': ['statica=statica.cli:main']
    }
)
