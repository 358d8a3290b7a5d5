import logging
import os
import time

from sf_restapi import SalesforceClient

LOGGER = logging.getLogger()
logging.basicConfig(level=logging.INFO)

ACCOUNTS = [{"Name": f"Bulk Example {n}"} for n in range(1, 11)]


def insert_accounts(client: SalesforceClient):
    job = client.bulk.create_job("insert", "Account")
    batch = client.bulk.add_batch(job, ACCOUNTS)
    job = client.bulk.close_job(job)

    while not batch.is_done:
        time.sleep(5)
        batch = client.bulk.get_batch_info(job, batch)
        LOGGER.info("Batch %s is %s", batch.id, batch.state)

    results = client.bulk.get_batch_results(job, batch)
    LOGGER.info("Inserted %d accounts", sum(1 for result in results if result.success))
    for result in results:
        if not result.success:
            LOGGER.warning("Failed: %s", result.errors)


with SalesforceClient(
    login_url=os.environ.get("SF_LOGIN_URL", "https://test.salesforce.com"),
    client_id=os.environ["SF_CLIENT_ID"],
    client_secret=os.environ["SF_CLIENT_SECRET"],
) as client:
    client.login(
        os.environ["SF_USERNAME"],
        os.environ["SF_PASSWORD"],
        os.environ.get("SF_SECURITY_TOKEN", ""),
    )
    insert_accounts(client)
    print(client.api_usage)
