from setuptools import find_packages, setup

exec(open('imgmi/_version.py').read())

setup(name='imgmi',
        version=__version__,
        description='Mutual information between two images',
        packages=find_packages(include=['imgmi', 'imgmi.*']),
        include_package_data = True,
        python_requires='>=3.8',
        install_requires=[
            'numpy',
            'PyYAML',
            'scikit-image>=0.19',
            'scipy'],
        tests_require=[
            'pytest',
            ],
        extras_require={
            'test': ['pytest'],
            })
