from setuptools import setup, find_namespace_packages

setup(name='sockspec',
      version='0.1.0',
      description='Uniform address specifications for binding, listening and connecting trio sockets',
      classifiers=[
          "Programming Language :: Python :: 3",
          "License :: OSI Approved :: MIT License",
          "Operating System :: POSIX :: Linux",
          "Framework :: Trio",
      ],
      keywords='linux socket address trio',
      license='MIT',
      python_requires='>=3.8',
      install_requires=[
          'trio>=0.23',
          'cffi',
      ],
      extras_require={
          'test': ['pytest'],
      },
      # sys/ and netinet/ mirror the C headers and have no __init__.py
      packages=find_namespace_packages(include=['sockspec', 'sockspec.*']),
)
