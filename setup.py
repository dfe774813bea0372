from setuptools import setup, find_packages

setup(
    name="cf-waf-sync",
    version="0.1.0",
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'requests>=2.28.0',
        'python-dotenv>=1.0.0',
        'prettytable>=3.0.0',  # For formatted table output
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'cf-waf-sync=cf_waf_sync.main:main',
        ],
    },
    python_requires='>=3.8',
    author="Erfi Anugrah",
    author_email="",
    description="Synchronize Cloudflare WAF custom rules from a local JSON file to many zones",
    long_description=open('README.md').read(),
    long_description_content_type="text/markdown",
    url="https://github.com/erfianugrah/cloudflare_api_scripts",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Security",
    ],
    project_urls={
        "Bug Reports": "https://github.com/erfianugrah/cloudflare_api_scripts/issues",
        "Source": "https://github.com/erfianugrah/cloudflare_api_scripts",
    },
)
