TEST_BUCKET_NAME = "test-bucket"
TEST_CSV_NAME = "businesses.csv"
TEST_CSV_CONTENT = b"name,city\nAcme Bakery,Springfield\nBolt Hardware,Shelbyville\n"
