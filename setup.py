from setuptools import find_packages, setup

package_name = 'ransac_consensus'

setup(
    name=package_name,
    version='1.0.0',
    packages=find_packages(exclude=['test', 'examples']),
    package_data={
        # Default parameter file
        package_name: ['data/*.yaml'],
    },
    include_package_data=True,
    install_requires=['setuptools', 'numpy>=1.25', 'pyyaml'],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    maintainer='SAI ESWARA M',
    maintainer_email='saimurali2005@gmail.com',
    description='Model-agnostic RANSAC estimation with pluggable models',
    license='MIT',
    tests_require=['pytest'],
    python_requires='>=3.9',
)
