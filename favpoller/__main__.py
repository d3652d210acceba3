from favpoller.main import main

main()
