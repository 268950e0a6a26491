pytest_plugins = [
    "tests.fixtures.aws_fixtures",
    "tests.fixtures.fake_services",
]
