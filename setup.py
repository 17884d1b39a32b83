from setuptools import find_packages, setup

setup(
    name='siwe',
    version='0.2.0',
    author='Spruce Systems, Inc.',
    project_urls={
        'Homepage': 'https://login.xyz',
        'Source': 'https://github.com/spruceid/siwe-py',
        'EIP-4361': 'https://github.com/ethereum/EIPs/blob/master/EIPS/eip-4361.md'
    },
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    license='MIT',
    description='Create, parse and verify Sign-In with Ethereum (EIP-4361) messages.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    python_requires='>=3.8',
    install_requires=[
        'abnf>=2.2,<3',
        'eth-account>=0.10',
        'eth-keys>=0.4',
        'eth-typing>=3.5',
        'eth-utils>=2.3',
        'pydantic>=2.7,<3',
        'structlog>=23.1',
        'typing-extensions>=4.8',
        'web3>=6.15',
    ],
    extras_require={
        'test': [
            'pyhumps>=3.8',
            'pytest>=7.4',
            'python-dateutil>=2.8',
        ],
    },
)
